"""
Request principals and route guards.

Two kinds of principal reach the API: recruiters, carrying a locally signed
token in the ``token`` header, and applicants, carrying an identity-provider
bearer token in ``Authorization``. Each kind has its own verification
strategy; routes only declare which kind they need.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from fastapi import Depends, Request

from jobportal.core.config import settings
from jobportal.core.errors import Forbidden, NotFound, ServiceUnavailable, Unauthorized
from jobportal.core.identity import IdentityProvider, InvalidIdentityToken
from jobportal.core.security import decode_recruiter_token
from jobportal.storage import Storage
from jobportal.storage.records import ApplicantRecord, CompanyRecord

logger = logging.getLogger("jobportal.auth")

RECRUITER = "recruiter"
APPLICANT = "applicant"


@dataclass
class Principal:
    """The authenticated caller of a request."""

    kind: str
    id: Optional[int] = None
    subject_id: Optional[str] = None
    company: Optional[CompanyRecord] = None
    applicant: Optional[ApplicantRecord] = None
    claims: dict[str, Any] = field(default_factory=dict)


# ============== Shared dependencies ==============


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_identity_provider(request: Request) -> Optional[IdentityProvider]:
    return request.app.state.identity_provider


def ensure_company_allowed(email: str, message: str) -> None:
    """Enforce the optional recruiter allow-list (case-insensitive)."""
    allowlist = settings.company_allowlist
    if allowlist and (email or "").lower() not in allowlist:
        raise Forbidden(message)


# ============== Strategies ==============


class RecruiterTokenStrategy:
    kind = RECRUITER
    header = "token"

    def resolve(self, request: Request, storage: Storage) -> Principal:
        token = request.headers.get(self.header)
        if not token:
            raise Unauthorized("Access denied. No token provided.")

        company_id = decode_recruiter_token(token)
        if company_id is None:
            raise Unauthorized("Invalid token.")

        company = storage.get_company(company_id)
        if company is None:
            raise Unauthorized("Company not found.")

        ensure_company_allowed(
            company.email, "Your company is not authorized to perform this action."
        )

        return Principal(kind=self.kind, id=company.id, company=company)


class ApplicantTokenStrategy:
    """
    Delegates bearer-token verification to the identity provider.

    With ``require_profile`` the subject must already have an applicant
    record; the sync and email-update routes only need the subject id.
    """

    kind = APPLICANT

    def __init__(self, require_profile: bool = True) -> None:
        self.require_profile = require_profile

    def resolve(self, request: Request, storage: Storage) -> Principal:
        provider = get_identity_provider(request)
        if provider is None:
            raise ServiceUnavailable("Authentication service not configured")

        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            raise Unauthorized("No token provided")

        token = auth_header[len("Bearer "):].strip()
        try:
            claims = provider.verify_token(token)
        except InvalidIdentityToken as e:
            logger.warning("Token verification error: %s", e)
            raise Unauthorized("Invalid token")

        subject_id = claims.get("sub") if claims else None
        if not subject_id:
            raise Unauthorized("Invalid token")

        principal = Principal(kind=self.kind, subject_id=subject_id, claims=claims)
        if not self.require_profile:
            return principal

        applicant = storage.get_applicant_by_subject(subject_id)
        if applicant is None:
            raise NotFound("User profile not found. Please complete your profile setup.")

        principal.id = applicant.id
        principal.applicant = applicant
        return principal


# ============== Route guards ==============


def require_principal(kind: str, require_profile: bool = True) -> Callable[..., Principal]:
    """Build a dependency that resolves the caller as the given kind."""
    if kind == RECRUITER:
        strategy = RecruiterTokenStrategy()
    elif kind == APPLICANT:
        strategy = ApplicantTokenStrategy(require_profile=require_profile)
    else:
        raise ValueError(f"Unknown principal kind: {kind}")

    def dependency(request: Request, storage: Storage = Depends(get_storage)) -> Principal:
        return strategy.resolve(request, storage)

    return dependency


require_recruiter = require_principal(RECRUITER)
require_applicant = require_principal(APPLICANT)
require_applicant_identity = require_principal(APPLICANT, require_profile=False)

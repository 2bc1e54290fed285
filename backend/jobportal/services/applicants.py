"""
Applicant profile sync and email conflict resolution.

Applicant records are only ever created by ``sync_applicant``. When the
email presented by the identity provider already belongs to another subject,
sync refuses with a Conflict; the user then picks another email through
``update_applicant_email`` and syncs again. Accounts are never merged.
"""

import logging
import re
from typing import NamedTuple, Optional

from jobportal.core.errors import Conflict, NotFound, ValidationError
from jobportal.db.base import utcnow
from jobportal.storage import DuplicateRecord, Storage
from jobportal.storage.records import ApplicantRecord

logger = logging.getLogger("jobportal.applicants")

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class SyncResult(NamedTuple):
    applicant: ApplicantRecord
    action: str  # "created" | "updated"


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email or ""))


def sync_applicant(
    storage: Storage,
    subject_id: str,
    email: Optional[str],
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
) -> SyncResult:
    """Create or refresh the applicant record for an identity-provider subject."""
    email = normalize_email(email)
    if not email:
        raise ValidationError("Email is required")

    existing = storage.get_applicant_by_subject(subject_id)
    if existing is not None:
        try:
            updated = storage.update_applicant(
                existing.id,
                email=email,
                first_name=(first_name or existing.first_name or "").strip(),
                last_name=(last_name or existing.last_name or "").strip(),
                last_updated=utcnow(),
            )
        except DuplicateRecord:
            owner = storage.get_applicant_by_email(email)
            raise Conflict(
                "Email already registered with a different account",
                extra={"existingUserId": owner.id if owner else None},
            )
        return SyncResult(updated, "updated")

    owner = storage.get_applicant_by_email(email)
    if owner is not None and owner.subject_id != subject_id:
        logger.info("Sync conflict: %s already bound to applicant %s", email, owner.id)
        raise Conflict(
            "Email already registered with a different account",
            extra={
                "details": "This email is associated with another user account",
                "suggestion": "Please use a different email address or contact support to resolve this conflict",
                "existingUserId": owner.id,
            },
        )

    try:
        created = storage.create_applicant(
            subject_id=subject_id,
            email=email,
            first_name=(first_name or "").strip(),
            last_name=(last_name or "").strip(),
        )
    except DuplicateRecord:
        raise Conflict(
            "User already exists",
            extra={"details": "A user with this subject id or email already exists"},
        )

    logger.info("Applicant %s created for subject %s", created.id, subject_id)
    return SyncResult(created, "created")


def update_applicant_email(storage: Storage, subject_id: str, new_email: Optional[str]) -> ApplicantRecord:
    """Rebind the caller's profile to a new email after a sync conflict."""
    new_email = normalize_email(new_email)
    if not new_email:
        raise ValidationError("New email is required")
    if not is_valid_email(new_email):
        raise ValidationError("Please enter a valid email address")

    owner = storage.get_applicant_by_email(new_email)
    if owner is not None and owner.subject_id != subject_id:
        raise Conflict("Email already in use by another account")

    applicant = storage.get_applicant_by_subject(subject_id)
    if applicant is None:
        raise NotFound("User not found")

    try:
        return storage.update_applicant(applicant.id, email=new_email, last_updated=utcnow())
    except DuplicateRecord:
        raise Conflict("Email already in use by another account")

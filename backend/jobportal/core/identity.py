"""
External identity provider integration.

Applicants authenticate with a bearer token issued by a hosted identity
provider. The backend never inspects those tokens itself beyond delegating
to ``IdentityProvider.verify_token``, which returns the claims or raises
``InvalidIdentityToken``.
"""

import logging
from typing import Any, Optional, Protocol, Sequence

import jwt
from jwt.exceptions import InvalidTokenError, PyJWKClientError

from jobportal.core.config import Settings

logger = logging.getLogger("jobportal.identity")


class InvalidIdentityToken(Exception):
    """Raised when the identity provider rejects a bearer token."""


class IdentityProvider(Protocol):
    def verify_token(self, token: str) -> dict[str, Any]:
        ...


class JWKSIdentityProvider:
    """
    Verifies RS256 session tokens against the provider's published JWKS.

    Signing keys are fetched and cached by PyJWT's ``PyJWKClient``. When
    ``authorized_parties`` is set, the ``azp`` claim (if present) must be one
    of them.
    """

    algorithms = ["RS256"]

    def __init__(
        self,
        jwks_url: str,
        issuer: Optional[str] = None,
        authorized_parties: Sequence[str] = (),
    ) -> None:
        self.jwks_url = jwks_url
        self.issuer = issuer or None
        self.authorized_parties = list(authorized_parties)
        self._jwks_client = jwt.PyJWKClient(jwks_url)

    def verify_token(self, token: str) -> dict[str, Any]:
        try:
            signing_key = self._jwks_client.get_signing_key_from_jwt(token)
            claims = jwt.decode(
                token,
                signing_key.key,
                algorithms=self.algorithms,
                issuer=self.issuer,
                options={"verify_aud": False, "require": ["sub", "exp"]},
            )
        except (InvalidTokenError, PyJWKClientError) as e:
            raise InvalidIdentityToken(str(e)) from e

        azp = claims.get("azp")
        if self.authorized_parties and azp and azp not in self.authorized_parties:
            raise InvalidIdentityToken(f"Unauthorized party: {azp}")

        return claims


def build_identity_provider(settings: Settings) -> Optional[IdentityProvider]:
    """Create the configured provider, or None when applicant auth is disabled."""
    if not settings.IDENTITY_JWKS_URL:
        logger.warning("⚠️ IDENTITY_JWKS_URL not set - applicant routes will answer 503")
        return None

    return JWKSIdentityProvider(
        settings.IDENTITY_JWKS_URL,
        issuer=settings.IDENTITY_ISSUER,
        authorized_parties=settings.authorized_parties,
    )

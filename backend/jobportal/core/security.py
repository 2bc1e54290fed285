"""
Security utilities for recruiter authentication.

Provides password hashing (bcrypt), signed recruiter tokens (JWT) and
password-reset tokens.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from jwt.exceptions import InvalidTokenError
from passlib.context import CryptContext

from jobportal.core.config import settings

# Password hashing context using bcrypt
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Args:
        plain_password: The plain text password to verify
        hashed_password: The hashed password to compare against

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: The plain text password to hash

    Returns:
        The hashed password string
    """
    return pwd_context.hash(password)


def create_recruiter_token(recruiter_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """
    Issue a signed, time-boxed token for a recruiter.

    Args:
        recruiter_id: Primary key of the recruiter (company)
        expires_delta: Optional custom lifetime, defaults to
            RECRUITER_TOKEN_EXPIRE_DAYS

    Returns:
        The encoded JWT token string
    """
    if expires_delta is None:
        expires_delta = timedelta(days=settings.RECRUITER_TOKEN_EXPIRE_DAYS)

    now = datetime.now(timezone.utc)
    to_encode = {"id": recruiter_id, "iat": now, "exp": now + expires_delta}

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET,
        algorithm=settings.ALGORITHM,
    )


def decode_recruiter_token(token: str) -> Optional[int]:
    """
    Decode and validate a recruiter token.

    Returns:
        The recruiter id carried by the token, or None if the signature,
        expiry or payload is invalid
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.ALGORITHM],
            options={"require": ["exp"]},
        )
    except InvalidTokenError:
        return None

    recruiter_id = payload.get("id")
    if not isinstance(recruiter_id, int) or isinstance(recruiter_id, bool):
        return None
    return recruiter_id


def generate_reset_token() -> str:
    """Random hex token for the password-reset link."""
    return secrets.token_hex(32)


def reset_token_matches(expected: Optional[str], presented: str) -> bool:
    if not expected:
        return False
    return secrets.compare_digest(expected, presented)

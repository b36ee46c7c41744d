"""
Security Utilities

Password hashing (bcrypt via passlib), JWT creation and validation
(python-jose) and temporary credential generation.
"""

import logging
import secrets
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Unambiguous characters only (no 0/O, 1/l/I)
TEMP_PASSWORD_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZabcdefghijkmnpqrstuvwxyz23456789!@#$%&*"
TEMP_PASSWORD_LENGTH = 8


def hash_password(password: str) -> str:
    """Hash a plaintext password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash."""
    try:
        return pwd_context.verify(plain_password, password_hash)
    except ValueError:
        logger.warning("Stored password hash could not be parsed")
        return False


def generate_temp_password(length: int = TEMP_PASSWORD_LENGTH) -> str:
    """Generate a one-time password for admin-created accounts."""
    return "".join(secrets.choice(TEMP_PASSWORD_ALPHABET) for _ in range(length))


def _create_token(
    subject: str,
    token_type: str,
    expires_delta: timedelta,
    additional_claims: dict[str, Any] | None = None,
) -> str:
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        "sub": subject,
        "type": token_type,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + expires_delta,
    }
    if additional_claims:
        payload.update(additional_claims)
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(
    subject: str,
    additional_claims: dict[str, Any] | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed access token.

    Args:
        subject: User id placed in the ``sub`` claim
        additional_claims: Extra claims (email, role, school_id, name)
        expires_delta: Override for the configured lifetime

    Returns:
        Encoded JWT string
    """
    return _create_token(
        subject,
        "access",
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes),
        additional_claims,
    )


def create_refresh_token(subject: str) -> str:
    """Create a signed refresh token."""
    return _create_token(
        subject,
        "refresh",
        timedelta(days=settings.refresh_token_expire_days),
    )


def decode_token(token: str) -> dict[str, Any] | None:
    """
    Decode and validate a JWT.

    Returns:
        The claims dict, or None if the signature is invalid or the token expired
    """
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.debug(f"Token rejected: {e}")
        return None

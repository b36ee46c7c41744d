"""
Authentication and Authorization Module

FastAPI dependencies for JWT validation and role-based access control.

Tokens carry the caller's id, email, role, school and display name; a token
whose ``jti`` has been revoked by sign-out is rejected even before it expires.
"""

import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.redis import is_token_revoked
from app.core.security import decode_token

logger = logging.getLogger(__name__)

# Security scheme for OpenAPI documentation
security = HTTPBearer(
    auto_error=True,
    description="JWT Bearer token for authentication",
)

ADMIN_ROLES = ("school_admin", "sub_admin")


@dataclass
class CurrentUser:
    """
    The authenticated caller, populated from JWT claims.

    Attributes:
        id: User id (also the identity id)
        email: Email address
        role: Role name (school_admin, teacher, ...)
        school_id: Tenant the caller belongs to
        name: Display name
        token_id: The token's ``jti``, used for revocation on sign-out
        expires_at: Token expiry (epoch seconds)
    """

    id: str
    email: str
    role: str
    school_id: str | None = None
    name: str | None = None
    token_id: str | None = None
    expires_at: int | None = None

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    def seconds_until_expiry(self) -> int:
        if self.expires_at is None:
            return 0
        return max(int(self.expires_at - datetime.now(UTC).timestamp()), 0)

    def __str__(self) -> str:
        return f"CurrentUser(id={self.id}, email={self.email}, role={self.role})"


def _unauthorized(error: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": error, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def authenticate_token(token: str) -> CurrentUser:
    """
    Validate an access token and build the CurrentUser.

    Used by the bearer dependency and by the session WebSocket, which
    receives its token as a query parameter.

    Raises:
        HTTPException 401: If the token is invalid, expired, revoked, or not an access token
    """
    payload = decode_token(token)

    if payload is None:
        logger.warning("Invalid or expired JWT token")
        raise _unauthorized("INVALID_TOKEN", "Invalid or expired authentication token.")

    if payload.get("type", "access") != "access":
        logger.warning(f"Invalid token type: {payload.get('type')}")
        raise _unauthorized("INVALID_TOKEN_TYPE", "This endpoint requires an access token.")

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("INVALID_TOKEN_CLAIMS", "Token contains invalid or missing claims.")

    if await is_token_revoked(payload.get("jti")):
        logger.info(f"Rejected revoked token for user {user_id}")
        raise _unauthorized("TOKEN_REVOKED", "This session has been signed out.")

    return CurrentUser(
        id=user_id,
        email=payload.get("email", ""),
        role=payload.get("role", ""),
        school_id=payload.get("school_id"),
        name=payload.get("name"),
        token_id=payload.get("jti"),
        expires_at=payload.get("exp"),
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> CurrentUser:
    """
    FastAPI dependency returning the authenticated caller.

    Raises:
        HTTPException 401: If token is missing, invalid, expired, or revoked
    """
    user = await authenticate_token(credentials.credentials)
    logger.debug(f"Authenticated user: {user.id} ({user.role})")
    return user


def require_roles(*roles: str) -> Callable[..., Coroutine[Any, Any, CurrentUser]]:
    """
    Build a dependency that only admits callers with one of the given roles.

    Usage:
        @router.post("/", dependencies=[Depends(require_roles("school_admin"))])

    Raises:
        HTTPException 403: If the caller's role is not allowed
    """

    async def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in roles:
            logger.warning(
                f"Access denied: User {user.id} has role '{user.role}', requires one of {roles}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "error": "PERMISSION_DENIED",
                    "message": "You do not have permission to access this resource.",
                },
            )
        return user

    return dependency


__all__ = [
    "ADMIN_ROLES",
    "CurrentUser",
    "authenticate_token",
    "get_current_user",
    "require_roles",
]

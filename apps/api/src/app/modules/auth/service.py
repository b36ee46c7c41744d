"""
Authentication Service Layer

Sign-in, sign-up, sign-out and self-service profile updates.

Sign-up is the one multi-row atomic write in the system: the sign-in
identity, the administrator's user document and the school are created in a
single transaction, and the school's id is the administrator's identity id.
Either all three exist afterwards or none do.
"""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser
from app.core.events import event_bus
from app.core.redis import revoke_token
from app.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    verify_password,
)
from app.modules.auth.repository import AuthAccountRepository
from app.modules.auth.schemas import RegisterRequest
from app.modules.schools.models import School
from app.modules.schools.repository import SchoolRepository
from app.modules.shared import NotFoundError, ServiceError
from app.modules.users.models import AuthStatus, User, UserRole
from app.modules.users.repository import UserRepository
from app.modules.users.schemas import ProfileUpdate
from app.modules.users.service import merge_profile

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"


class AuthError(ServiceError):
    """Raised when credentials or tokens are rejected."""

    def __init__(self, message: str, error_code: str = "INVALID_CREDENTIALS", status_code: int = 401):
        super().__init__(message=message, error_code=error_code, status_code=status_code)


class AccountCreationError(ServiceError):
    """Raised when sign-up fails; nothing from the attempt is persisted."""

    def __init__(self, message: str, error_code: str = "ACCOUNT_CREATION_FAILED", status_code: int = 400):
        super().__init__(message=message, error_code=error_code, status_code=status_code)


@dataclass
class AuthResult:
    user: User
    school: School | None
    access_token: str
    refresh_token: str


def _issue_tokens(user: User) -> tuple[str, str]:
    additional_claims = {
        "email": user.email,
        "role": user.role.value,
        "school_id": user.school_id,
        "name": user.full_name,
    }
    access_token = create_access_token(subject=str(user.id), additional_claims=additional_claims)
    refresh_token = create_refresh_token(subject=str(user.id))
    return access_token, refresh_token


async def sign_in(db: AsyncSession, email: str, password: str) -> AuthResult:
    """
    Authenticate with email and password.

    Raises:
        AuthError 401: Unknown email or wrong password
        AuthError 403: Disabled identity or deactivated user
    """
    account = await AuthAccountRepository.get_by_email(db, email)

    if account is None or not verify_password(password, account.password_hash):
        logger.warning("Failed sign-in attempt")
        raise AuthError("Invalid email or password.")

    if account.disabled:
        logger.warning(f"Sign-in attempt for disabled account: {account.id}")
        raise AuthError("This account has been disabled.", "ACCOUNT_DISABLED", 403)

    user = await UserRepository.get_by_id(db, account.id)
    if user is None:
        logger.error(f"Auth account {account.id} has no user document")
        raise AuthError("Invalid email or password.")

    if not user.is_active:
        logger.warning(f"Sign-in attempt for inactive user: {user.id}")
        raise AuthError("Your account has been deactivated.", "ACCOUNT_INACTIVE", 403)

    await AuthAccountRepository.record_sign_in(db, account)
    await db.commit()

    school = await SchoolRepository.get_by_id(db, user.school_id) if user.school_id else None
    access_token, refresh_token = _issue_tokens(user)

    logger.info(f"User signed in: {user.id} (role: {user.role.value})")
    return AuthResult(user, school, access_token, refresh_token)


async def sign_up(db: AsyncSession, data: RegisterRequest) -> AuthResult:
    """
    Register a school administrator and their school.

    Raises:
        AccountCreationError: If the email is taken or any write fails. On
            failure the transaction is rolled back and nothing persists.
    """
    if await AuthAccountRepository.get_by_email(db, data.email) is not None or (
        await UserRepository.email_exists(db, data.email)
    ):
        raise AccountCreationError(
            f"An account with email {data.email} already exists.",
            error_code="EMAIL_EXISTS",
            status_code=409,
        )

    identity_id = str(uuid.uuid4())
    display_name = f"{data.first_name} {data.last_name}"
    profile = {"first_name": data.first_name, "last_name": data.last_name}
    if data.phone:
        profile["phone"] = data.phone

    try:
        await AuthAccountRepository.create(
            db,
            account_id=identity_id,
            email=data.email,
            password=data.password,
            display_name=display_name,
        )

        school = await SchoolRepository.create(
            db,
            school_id=identity_id,
            name=data.school_name,
            admin_id=identity_id,
            email=data.email.lower(),
            phone=data.phone,
        )

        user = await UserRepository.create(
            db,
            user_id=identity_id,
            email=data.email.lower(),
            role=UserRole(data.role),
            school_id=school.id,
            profile=profile,
            auth_status=AuthStatus.COMPLETE,
        )

        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.error(f"Sign-up failed, rolled back: {e}", exc_info=True)
        raise AccountCreationError(f"Failed to create account: {e}") from e

    logger.info(f"Registered school {school.id} ({school.name}) with admin {user.id}")

    await event_bus.publish_created("schools", school.id)
    await event_bus.publish_created(USERS_COLLECTION, user.id)

    access_token, refresh_token = _issue_tokens(user)
    return AuthResult(user, school, access_token, refresh_token)


async def refresh_session(db: AsyncSession, refresh_token: str) -> tuple[str, str]:
    """Exchange a refresh token for a new token pair."""
    payload = decode_token(refresh_token)
    if payload is None or payload.get("type") != "refresh":
        raise AuthError("Invalid or expired refresh token.", "INVALID_TOKEN")

    user = await UserRepository.get_by_id(db, payload.get("sub", ""))
    if user is None or not user.is_active:
        raise AuthError("Your account has been deactivated.", "ACCOUNT_INACTIVE", 403)

    return _issue_tokens(user)


async def sign_out(actor: CurrentUser) -> None:
    """Revoke the caller's access token for the rest of its lifetime."""
    if actor.token_id:
        await revoke_token(actor.token_id, actor.seconds_until_expiry())
    logger.info(f"User signed out: {actor.id}")


async def update_user_profile(db: AsyncSession, actor: CurrentUser, updates: ProfileUpdate) -> User:
    """
    Merge provided profile fields into the caller's own user document.

    The change is announced on the change feed; live session contexts pick it
    up from there.
    """
    user = await UserRepository.get_by_id(db, actor.id)
    if user is None:
        raise NotFoundError("User", actor.id)

    changes = updates.model_dump(mode="json", exclude_unset=True)
    if not changes:
        return user

    try:
        user = await UserRepository.update(db, user, {"profile": merge_profile(user.profile, changes)})

        if "first_name" in changes or "last_name" in changes:
            account = await AuthAccountRepository.get_by_id(db, user.id)
            if account is not None:
                await AuthAccountRepository.set_display_name(db, account, user.full_name)

        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await event_bus.publish_updated(USERS_COLLECTION, user.id)
    return user

"""
User Service Layer

Member management for the dashboard groups (students, teachers, parents,
staff). Creating a member only writes the document in ``pending`` state with
a one-time credential; the user-creation handler on the change feed then
provisions the sign-in identity and sends the welcome email.
"""

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser
from app.core.events import event_bus
from app.core.security import generate_temp_password
from app.modules.classes.repository import ClassRepository
from app.modules.shared import NotFoundError, ServiceError, ValidationFailedError
from app.modules.users.models import STAFF_ROLES, AuthStatus, User, UserRole
from app.modules.users.repository import UserRepository
from app.modules.users.schemas import MemberCreate, MemberUpdate

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"


@dataclass(frozen=True)
class MemberGroup:
    """A dashboard member list: which roles it shows and the role new members get."""

    name: str
    roles: tuple[UserRole, ...]
    default_role: UserRole


MEMBER_GROUPS: dict[str, MemberGroup] = {
    "students": MemberGroup("students", (UserRole.STUDENT,), UserRole.STUDENT),
    "teachers": MemberGroup("teachers", (UserRole.TEACHER,), UserRole.TEACHER),
    "parents": MemberGroup("parents", (UserRole.PARENT,), UserRole.PARENT),
    "staff": MemberGroup("staff", STAFF_ROLES, UserRole.RECEPTIONIST),
}


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: str | None = None):
        super().__init__("User", user_id)


class EmailExistsError(ServiceError):
    """Raised when another member already uses the email address."""

    def __init__(self, email: str):
        super().__init__(
            message=f"A user with email {email} already exists.",
            error_code="EMAIL_EXISTS",
            status_code=409,
        )


class InvalidRoleError(ValidationFailedError):
    def __init__(self, role: str, group: str):
        super().__init__(
            message=f"Role '{role}' cannot be assigned to {group}.",
            error_code="INVALID_ROLE",
        )


def merge_profile(current: dict[str, Any] | None, updates: dict[str, Any]) -> dict[str, Any]:
    """
    Merge provided profile keys into the stored profile.

    The address is merged key-by-key as well, so a partial address update
    keeps the other address lines.
    """
    merged = dict(current or {})
    for key, value in updates.items():
        if key == "address" and isinstance(value, dict):
            address = dict(merged.get("address") or {})
            address.update(value)
            merged["address"] = address
        else:
            merged[key] = value
    return merged


async def _validate_class(db: AsyncSession, school_id: str, class_id: str | None) -> None:
    if class_id is None:
        return
    school_class = await ClassRepository.get_in_school(db, school_id, class_id)
    if school_class is None:
        raise NotFoundError("Class", class_id)


async def _validate_links(db: AsyncSession, school_id: str, user_ids: list[str], role: UserRole):
    """Parent/child links must point at members of the same school with the expected role."""
    if not user_ids:
        return
    linked = await UserRepository.get_many(db, user_ids)
    valid = {u.id for u in linked if u.school_id == school_id and u.role == role}
    missing = [uid for uid in user_ids if uid not in valid]
    if missing:
        raise ValidationFailedError(
            f"Linked {role.value} accounts not found in this school: {', '.join(missing)}",
            error_code="INVALID_LINK",
        )


def get_group(name: str) -> MemberGroup:
    return MEMBER_GROUPS[name]


async def list_members(
    db: AsyncSession,
    school_id: str,
    group: MemberGroup,
    include_inactive: bool = False,
) -> list[User]:
    """List a group's members in the caller's school (active only by default)."""
    users = await UserRepository.list_by_school(
        db,
        school_id,
        roles=group.roles,
        include_inactive=include_inactive,
    )
    return list(users)


async def get_member(db: AsyncSession, school_id: str, group: MemberGroup, user_id: str) -> User:
    user = await UserRepository.get_in_school(db, school_id, user_id)
    if user is None or user.role not in group.roles:
        raise UserNotFoundError(user_id)
    return user


async def create_member(
    db: AsyncSession,
    actor: CurrentUser,
    group: MemberGroup,
    data: MemberCreate,
) -> User:
    """
    Create a member in the caller's school.

    The document is written with ``auth_status=pending`` and a generated
    temporary credential, then announced on the change feed so the
    user-creation handler can provision the identity.

    Raises:
        InvalidRoleError: If the requested role does not belong to the group
        EmailExistsError: If the email is already in use
        NotFoundError: If the class does not exist in this school
    """
    role = data.role or group.default_role
    if role not in group.roles:
        raise InvalidRoleError(role.value, group.name)

    if await UserRepository.email_exists(db, data.email):
        raise EmailExistsError(data.email)

    await _validate_class(db, actor.school_id, data.class_id)
    await _validate_links(db, actor.school_id, data.parent_ids, UserRole.PARENT)
    await _validate_links(db, actor.school_id, data.children_ids, UserRole.STUDENT)

    try:
        user = await UserRepository.create(
            db,
            email=data.email.lower(),
            role=role,
            school_id=actor.school_id,
            profile=data.profile.model_dump(mode="json", exclude_none=True),
            auth_status=AuthStatus.PENDING,
            temp_password=generate_temp_password(),
            class_id=data.class_id if role == UserRole.STUDENT else None,
            parent_ids=data.parent_ids,
            children_ids=data.children_ids,
            employee_id=data.employee_id,
            admission_number=data.admission_number,
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(f"User {actor.id} created {role.value} {user.id} in school {actor.school_id}")

    await event_bus.publish_created(USERS_COLLECTION, user.id)
    return user


async def update_member(
    db: AsyncSession,
    actor: CurrentUser,
    group: MemberGroup,
    user_id: str,
    data: MemberUpdate,
) -> User:
    """Apply the provided fields to a member and return the persisted document."""
    user = await get_member(db, actor.school_id, group, user_id)
    changes = data.model_dump(mode="json", exclude_unset=True)

    if "role" in changes:
        role = UserRole(changes["role"])
        if role not in group.roles:
            raise InvalidRoleError(role.value, group.name)
        changes["role"] = role

    if "email" in changes and changes["email"].lower() != user.email.lower():
        if await UserRepository.email_exists(db, changes["email"]):
            raise EmailExistsError(changes["email"])
        changes["email"] = changes["email"].lower()

    if "profile" in changes:
        changes["profile"] = merge_profile(user.profile, changes["profile"] or {})

    # Only students belong to a class
    if changes.get("role", user.role) != UserRole.STUDENT:
        if "class_id" in changes or user.class_id is not None:
            changes["class_id"] = None
    elif "class_id" in changes:
        await _validate_class(db, actor.school_id, changes["class_id"])
    if changes.get("parent_ids"):
        await _validate_links(db, actor.school_id, changes["parent_ids"], UserRole.PARENT)
    if changes.get("children_ids"):
        await _validate_links(db, actor.school_id, changes["children_ids"], UserRole.STUDENT)

    try:
        user = await UserRepository.update(db, user, changes)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await event_bus.publish_updated(USERS_COLLECTION, user.id)
    return user


async def deactivate_member(
    db: AsyncSession,
    actor: CurrentUser,
    group: MemberGroup,
    user_id: str,
) -> User:
    """Soft-delete a member: the row is kept with ``is_active=false``."""
    user = await get_member(db, actor.school_id, group, user_id)

    try:
        user = await UserRepository.update(db, user, {"is_active": False})
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(f"User {actor.id} deactivated {user.role.value} {user.id}")

    await event_bus.publish_updated(USERS_COLLECTION, user.id)
    return user

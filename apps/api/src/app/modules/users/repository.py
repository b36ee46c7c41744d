"""
User Repository

Database operations for tenant members.
"""

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.shared import utcnow
from app.modules.users.models import AuthStatus, User, UserRole

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for user database operations."""

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        email: str,
        role: UserRole,
        school_id: str | None,
        profile: dict[str, Any],
        user_id: str | None = None,
        auth_status: AuthStatus = AuthStatus.COMPLETE,
        temp_password: str | None = None,
        class_id: str | None = None,
        parent_ids: list[str] | None = None,
        children_ids: list[str] | None = None,
        employee_id: str | None = None,
        admission_number: str | None = None,
        is_active: bool = True,
    ) -> User:
        """
        Create a new user record.

        Args:
            db: Database session
            email: User's email address
            role: User's role
            school_id: Tenant the user belongs to
            profile: Profile fields (names, phone, address, ...)
            user_id: Explicit id (sign-up uses the identity id)
            auth_status: ``pending`` for admin-created users awaiting provisioning
            temp_password: One-time credential for pending users

        Returns:
            Created User instance
        """
        user = User(
            email=email,
            role=role,
            school_id=school_id,
            profile=profile,
            auth_status=auth_status,
            temp_password=temp_password,
            temp_password_sent=False,
            class_id=class_id,
            parent_ids=parent_ids or [],
            children_ids=children_ids or [],
            employee_id=employee_id,
            admission_number=admission_number,
            is_active=is_active,
        )
        if user_id:
            user.id = user_id

        db.add(user)
        await db.flush()
        await db.refresh(user)

        logger.info(f"Created user: {user.id} - {user.email} ({user.role.value})")
        return user

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: str) -> User | None:
        result = await db.execute(select(User).where(User.id == str(user_id)))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> User | None:
        """Get a user by email address (case-insensitive)."""
        result = await db.execute(
            select(User).where(func.lower(User.email) == email.lower()).limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def email_exists(db: AsyncSession, email: str) -> bool:
        user = await UserRepository.get_by_email(db, email)
        return user is not None

    @staticmethod
    async def get_in_school(db: AsyncSession, school_id: str, user_id: str) -> User | None:
        """Get a user only if it belongs to the given school."""
        result = await db.execute(
            select(User).where(User.id == str(user_id), User.school_id == str(school_id))
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def list_by_school(
        db: AsyncSession,
        school_id: str,
        roles: Sequence[UserRole] | None = None,
        include_inactive: bool = False,
        class_id: str | None = None,
    ) -> Sequence[User]:
        """
        List members of a school.

        Args:
            db: Database session
            school_id: Tenant id
            roles: Restrict to these roles (None for every role)
            include_inactive: Include deactivated members
            class_id: Restrict to students of one class

        Returns:
            Users ordered by creation time, newest first
        """
        query = select(User).where(User.school_id == str(school_id))
        if roles:
            query = query.where(User.role.in_(list(roles)))
        if not include_inactive:
            query = query.where(User.is_active.is_(True))
        if class_id:
            query = query.where(User.class_id == str(class_id))

        result = await db.execute(query.order_by(User.created_at.desc()))
        return result.scalars().all()

    @staticmethod
    async def get_many(db: AsyncSession, user_ids: Sequence[str]) -> Sequence[User]:
        if not user_ids:
            return []
        result = await db.execute(select(User).where(User.id.in_([str(i) for i in user_ids])))
        return result.scalars().all()

    @staticmethod
    async def update(db: AsyncSession, user: User, changes: dict[str, Any]) -> User:
        """
        Apply a partial update.

        Only keys present in ``changes`` are written; ``updated_at`` is bumped.
        """
        for field, value in changes.items():
            setattr(user, field, value)
        user.updated_at = utcnow()

        await db.flush()
        await db.refresh(user)

        logger.info(f"Updated user {user.id}: {sorted(changes)}")
        return user

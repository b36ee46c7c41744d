"""
School Repository

Database operations for school management.
"""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.schools.models import School
from app.modules.shared import utcnow

logger = logging.getLogger(__name__)


class SchoolRepository:
    """Repository for school database operations."""

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        school_id: str,
        name: str,
        admin_id: str,
        email: str | None = None,
        phone: str | None = None,
        address: str | None = None,
    ) -> School:
        """
        Create a new school record.

        Args:
            db: Database session
            school_id: Id of the school (the creating admin's identity id)
            name: School name
            admin_id: Creating administrator's user id
            email: School contact email
            phone: School phone number
            address: Postal address

        Returns:
            Created School instance
        """
        school = School(
            id=school_id,
            name=name,
            admin_id=admin_id,
            email=email,
            phone=phone,
            address=address,
            is_active=True,
        )

        db.add(school)
        await db.flush()
        await db.refresh(school)

        logger.info(f"Created school: {school.id} - {school.name}")
        return school

    @staticmethod
    async def get_by_id(db: AsyncSession, school_id: str) -> School | None:
        result = await db.execute(select(School).where(School.id == str(school_id)))
        return result.scalar_one_or_none()

    @staticmethod
    async def update(db: AsyncSession, school: School, changes: dict[str, Any]) -> School:
        """
        Apply a partial update to a school.

        Only keys present in ``changes`` are written; ``updated_at`` is bumped.
        """
        for field, value in changes.items():
            setattr(school, field, value)
        school.updated_at = utcnow()

        await db.flush()
        await db.refresh(school)

        logger.info(f"Updated school {school.id}: {sorted(changes)}")
        return school

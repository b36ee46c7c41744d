"""
Class Repository

Database operations for class sections.
"""

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.classes.models import SchoolClass
from app.modules.shared import utcnow

logger = logging.getLogger(__name__)


class ClassRepository:
    """Repository for class database operations."""

    @staticmethod
    async def create(db: AsyncSession, *, school_id: str, fields: dict[str, Any]) -> SchoolClass:
        school_class = SchoolClass(school_id=school_id, is_active=True, **fields)

        db.add(school_class)
        await db.flush()
        await db.refresh(school_class)

        logger.info(f"Created class: {school_class.id} - {school_class.name}")
        return school_class

    @staticmethod
    async def get_in_school(db: AsyncSession, school_id: str, class_id: str) -> SchoolClass | None:
        result = await db.execute(
            select(SchoolClass).where(
                SchoolClass.id == str(class_id),
                SchoolClass.school_id == str(school_id),
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def list_by_school(
        db: AsyncSession,
        school_id: str,
        include_inactive: bool = False,
    ) -> Sequence[SchoolClass]:
        query = select(SchoolClass).where(SchoolClass.school_id == str(school_id))
        if not include_inactive:
            query = query.where(SchoolClass.is_active.is_(True))
        result = await db.execute(query.order_by(SchoolClass.grade, SchoolClass.name))
        return result.scalars().all()

    @staticmethod
    async def update(db: AsyncSession, school_class: SchoolClass, changes: dict[str, Any]) -> SchoolClass:
        for field, value in changes.items():
            setattr(school_class, field, value)
        school_class.updated_at = utcnow()

        await db.flush()
        await db.refresh(school_class)

        logger.info(f"Updated class {school_class.id}: {sorted(changes)}")
        return school_class

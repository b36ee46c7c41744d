"""
Announcement Repository
"""

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.announcements.models import Announcement
from app.modules.shared import utcnow

logger = logging.getLogger(__name__)


class AnnouncementRepository:
    """Repository for announcement database operations."""

    @staticmethod
    async def create(db: AsyncSession, **fields: Any) -> Announcement:
        announcement = Announcement(**fields)

        db.add(announcement)
        await db.flush()
        await db.refresh(announcement)

        logger.info(f"Created announcement: {announcement.id} - {announcement.title}")
        return announcement

    @staticmethod
    async def get_by_id(db: AsyncSession, announcement_id: str) -> Announcement | None:
        result = await db.execute(select(Announcement).where(Announcement.id == str(announcement_id)))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_in_school(db: AsyncSession, school_id: str, announcement_id: str) -> Announcement | None:
        result = await db.execute(
            select(Announcement).where(
                Announcement.id == str(announcement_id),
                Announcement.school_id == str(school_id),
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def list_by_school(db: AsyncSession, school_id: str) -> Sequence[Announcement]:
        """All announcements of a school, newest first."""
        result = await db.execute(
            select(Announcement)
            .where(Announcement.school_id == str(school_id))
            .order_by(Announcement.created_at.desc())
        )
        return result.scalars().all()

    @staticmethod
    async def update(db: AsyncSession, announcement: Announcement, changes: dict[str, Any]) -> Announcement:
        for field, value in changes.items():
            setattr(announcement, field, value)
        announcement.updated_at = utcnow()

        await db.flush()
        await db.refresh(announcement)
        return announcement

    @staticmethod
    async def delete(db: AsyncSession, announcement: Announcement) -> None:
        await db.delete(announcement)
        await db.flush()
        logger.info(f"Deleted announcement: {announcement.id}")

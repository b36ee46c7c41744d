"""
Announcement Service Layer

Creating an announcement commits the document and announces it on the
change feed; the announcement email handler then mails the audience and
records delivery counts on the document.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser
from app.core.events import event_bus
from app.modules.announcements.audience import is_in_audience
from app.modules.announcements.models import Announcement, AnnouncementStatus
from app.modules.announcements.repository import AnnouncementRepository
from app.modules.announcements.schemas import AnnouncementCreate, AnnouncementUpdate
from app.modules.shared import ForbiddenError, NotFoundError, utcnow
from app.modules.users.models import ADMIN_ROLES, User, UserRole
from app.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

ANNOUNCEMENTS_COLLECTION = "announcements"

# Roles that author announcements and see drafts and archived notices
AUTHOR_ROLES = {UserRole.SCHOOL_ADMIN.value, UserRole.SUB_ADMIN.value, UserRole.TEACHER.value}


class AnnouncementNotFoundError(NotFoundError):
    def __init__(self, announcement_id: str | None = None):
        super().__init__("Announcement", announcement_id)


@dataclass
class AnnouncementView:
    """An announcement with its author's user document attached."""

    announcement: Announcement
    author: User | None


def _is_visible(announcement: Announcement, actor: CurrentUser) -> bool:
    if actor.role in AUTHOR_ROLES:
        return True
    if announcement.status != AnnouncementStatus.PUBLISHED:
        return False
    if announcement.expiry_date is not None and announcement.expiry_date < utcnow():
        return False
    return is_in_audience(actor.role, announcement.target_audience)


def _can_modify(announcement: Announcement, actor: CurrentUser) -> bool:
    return actor.role in {r.value for r in ADMIN_ROLES} or announcement.author_id == actor.id


async def list_announcements(db: AsyncSession, actor: CurrentUser) -> list[AnnouncementView]:
    """
    Announcements of the caller's school, newest first, each with its author.

    Members who do not author announcements only see published, unexpired
    notices addressed to their role.
    """
    announcements = [
        a
        for a in await AnnouncementRepository.list_by_school(db, actor.school_id)
        if _is_visible(a, actor)
    ]

    author_ids = list({a.author_id for a in announcements})
    authors = {u.id: u for u in await UserRepository.get_many(db, author_ids)}

    return [AnnouncementView(a, authors.get(a.author_id)) for a in announcements]


async def get_announcement(db: AsyncSession, actor: CurrentUser, announcement_id: str) -> AnnouncementView:
    announcement = await AnnouncementRepository.get_in_school(db, actor.school_id, announcement_id)
    if announcement is None or not _is_visible(announcement, actor):
        raise AnnouncementNotFoundError(announcement_id)
    author = await UserRepository.get_by_id(db, announcement.author_id)
    return AnnouncementView(announcement, author)


async def create_announcement(
    db: AsyncSession,
    actor: CurrentUser,
    data: AnnouncementCreate,
) -> Announcement:
    try:
        announcement = await AnnouncementRepository.create(
            db,
            school_id=actor.school_id,
            author_id=actor.id,
            author_name=actor.name,
            title=data.title,
            content=data.content,
            target_audience=data.target_audience,
            priority=data.priority,
            status=data.status,
            publish_date=utcnow(),
            expiry_date=data.expiry_date,
            attachments=[a.model_dump() for a in data.attachments],
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(f"User {actor.id} published announcement {announcement.id}")

    await event_bus.publish_created(ANNOUNCEMENTS_COLLECTION, announcement.id)
    return announcement


async def update_announcement(
    db: AsyncSession,
    actor: CurrentUser,
    announcement_id: str,
    data: AnnouncementUpdate,
) -> Announcement:
    announcement = await AnnouncementRepository.get_in_school(db, actor.school_id, announcement_id)
    if announcement is None:
        raise AnnouncementNotFoundError(announcement_id)
    if not _can_modify(announcement, actor):
        raise ForbiddenError("Only the author or an administrator can edit this announcement.")

    changes = data.model_dump(exclude_unset=True)
    if "attachments" in changes and changes["attachments"] is not None:
        changes["attachments"] = [dict(a) for a in changes["attachments"]]

    try:
        announcement = await AnnouncementRepository.update(db, announcement, changes)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await event_bus.publish_updated(ANNOUNCEMENTS_COLLECTION, announcement.id)
    return announcement


async def delete_announcement(db: AsyncSession, actor: CurrentUser, announcement_id: str) -> None:
    """Hard-delete an announcement."""
    announcement = await AnnouncementRepository.get_in_school(db, actor.school_id, announcement_id)
    if announcement is None:
        raise AnnouncementNotFoundError(announcement_id)
    if not _can_modify(announcement, actor):
        raise ForbiddenError("Only the author or an administrator can delete this announcement.")

    try:
        await AnnouncementRepository.delete(db, announcement)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(f"User {actor.id} deleted announcement {announcement_id}")
    await event_bus.publish_deleted(ANNOUNCEMENTS_COLLECTION, announcement_id)

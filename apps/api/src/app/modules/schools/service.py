"""
School Service Layer
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser
from app.core.events import event_bus
from app.modules.schools.models import School
from app.modules.schools.repository import SchoolRepository
from app.modules.schools.schemas import SchoolUpdate
from app.modules.shared import NotFoundError

logger = logging.getLogger(__name__)

SCHOOLS_COLLECTION = "schools"


async def get_current_school(db: AsyncSession, actor: CurrentUser) -> School:
    if not actor.school_id:
        raise NotFoundError("School")
    school = await SchoolRepository.get_by_id(db, actor.school_id)
    if school is None:
        raise NotFoundError("School", actor.school_id)
    return school


async def update_current_school(db: AsyncSession, actor: CurrentUser, data: SchoolUpdate) -> School:
    """Apply provided fields; settings are merged key-by-key."""
    school = await get_current_school(db, actor)
    changes = data.model_dump(mode="json", exclude_unset=True)

    if changes.get("settings") is not None:
        changes["settings"] = {**(school.settings or {}), **changes["settings"]}

    try:
        school = await SchoolRepository.update(db, school, changes)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(f"User {actor.id} updated school {school.id}")
    await event_bus.publish_updated(SCHOOLS_COLLECTION, school.id)
    return school

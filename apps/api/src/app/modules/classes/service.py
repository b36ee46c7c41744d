"""
Class Service Layer
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser
from app.core.events import event_bus
from app.modules.classes.models import SchoolClass
from app.modules.classes.repository import ClassRepository
from app.modules.classes.schemas import ClassCreate, ClassUpdate
from app.modules.shared import NotFoundError, ValidationFailedError
from app.modules.users.models import UserRole
from app.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

CLASSES_COLLECTION = "classes"


class ClassNotFoundError(NotFoundError):
    def __init__(self, class_id: str | None = None):
        super().__init__("Class", class_id)


async def _validate_teacher(db: AsyncSession, school_id: str, teacher_id: str | None) -> None:
    """The class teacher must be an active teacher of the same school."""
    if teacher_id is None:
        return
    teacher = await UserRepository.get_in_school(db, school_id, teacher_id)
    if teacher is None or teacher.role != UserRole.TEACHER or not teacher.is_active:
        raise ValidationFailedError(
            f"Teacher {teacher_id} is not an active teacher in this school.",
            error_code="INVALID_CLASS_TEACHER",
        )


async def list_classes(
    db: AsyncSession,
    school_id: str,
    include_inactive: bool = False,
) -> list[SchoolClass]:
    return list(await ClassRepository.list_by_school(db, school_id, include_inactive))


async def get_class(db: AsyncSession, school_id: str, class_id: str) -> SchoolClass:
    school_class = await ClassRepository.get_in_school(db, school_id, class_id)
    if school_class is None:
        raise ClassNotFoundError(class_id)
    return school_class


async def create_class(db: AsyncSession, actor: CurrentUser, data: ClassCreate) -> SchoolClass:
    await _validate_teacher(db, actor.school_id, data.class_teacher_id)

    try:
        school_class = await ClassRepository.create(
            db,
            school_id=actor.school_id,
            fields=data.model_dump(),
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(f"User {actor.id} created class {school_class.id} ({school_class.grade})")
    await event_bus.publish_created(CLASSES_COLLECTION, school_class.id)
    return school_class


async def update_class(
    db: AsyncSession,
    actor: CurrentUser,
    class_id: str,
    data: ClassUpdate,
) -> SchoolClass:
    school_class = await get_class(db, actor.school_id, class_id)
    changes = data.model_dump(exclude_unset=True)

    if changes.get("class_teacher_id"):
        await _validate_teacher(db, actor.school_id, changes["class_teacher_id"])

    try:
        school_class = await ClassRepository.update(db, school_class, changes)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await event_bus.publish_updated(CLASSES_COLLECTION, school_class.id)
    return school_class


async def deactivate_class(db: AsyncSession, actor: CurrentUser, class_id: str) -> SchoolClass:
    """Soft-delete a class; its attendance history is kept."""
    school_class = await get_class(db, actor.school_id, class_id)

    try:
        school_class = await ClassRepository.update(db, school_class, {"is_active": False})
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(f"User {actor.id} deactivated class {school_class.id}")
    await event_bus.publish_updated(CLASSES_COLLECTION, school_class.id)
    return school_class

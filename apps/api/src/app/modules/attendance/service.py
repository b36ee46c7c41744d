"""
Attendance Service Layer

Marking is an upsert per (class, student, date): an existing record is
updated in place, otherwise a new one is inserted. Students left unmarked
are skipped, never deleted. The whole sheet is committed in one transaction
and the saved records are re-read afterwards.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser
from app.core.events import event_bus
from app.modules.attendance import repository
from app.modules.attendance.models import AttendanceRecord, AttendanceStatus
from app.modules.attendance.schemas import AttendanceSaveRequest
from app.modules.classes.repository import ClassRepository
from app.modules.shared import NotFoundError, ValidationFailedError, utcnow
from app.modules.users.models import User, UserRole
from app.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

ATTENDANCE_COLLECTION = "attendance"
NOT_SET = "not_set"


class FutureDateError(ValidationFailedError):
    def __init__(self, on_date: date):
        super().__init__(
            f"Attendance cannot be recorded for a future date ({on_date.isoformat()}).",
            error_code="FUTURE_DATE",
        )


class StudentNotInClassError(ValidationFailedError):
    def __init__(self, student_ids: Iterable[str]):
        super().__init__(
            f"Students are not on this class roster: {', '.join(sorted(student_ids))}",
            error_code="STUDENT_NOT_IN_CLASS",
        )


@dataclass
class Roster:
    class_id: str
    date: date
    students: list[User]
    records: list[AttendanceRecord]
    stats: dict[str, int]


@dataclass
class SaveResult:
    saved: int
    skipped: int
    records: list[AttendanceRecord]
    stats: dict[str, int]


def summarize(student_ids: Sequence[str], records: Iterable[AttendanceRecord]) -> dict[str, int]:
    """Count records per status; roster students without a record count as not_set."""
    stats = {status.value: 0 for status in AttendanceStatus}
    marked = set()
    for record in records:
        stats[AttendanceStatus(record.status).value] += 1
        marked.add(record.student_id)
    stats[NOT_SET] = sum(1 for sid in student_ids if sid not in marked)
    stats["total"] = len(student_ids)
    return stats


async def _load_roster(db: AsyncSession, school_id: str, class_id: str) -> list[User]:
    school_class = await ClassRepository.get_in_school(db, school_id, class_id)
    if school_class is None:
        raise NotFoundError("Class", class_id)

    students = await UserRepository.list_by_school(
        db,
        school_id,
        roles=[UserRole.STUDENT],
        class_id=class_id,
    )
    return list(students)


async def get_roster(db: AsyncSession, school_id: str, class_id: str, on_date: date) -> Roster:
    """Active students of the class with any attendance already recorded for the date."""
    students = await _load_roster(db, school_id, class_id)
    records = list(await repository.list_for_class_date(db, school_id, class_id, on_date))

    return Roster(
        class_id=class_id,
        date=on_date,
        students=students,
        records=records,
        stats=summarize([s.id for s in students], records),
    )


async def save_attendance(
    db: AsyncSession,
    actor: CurrentUser,
    data: AttendanceSaveRequest,
    today: date | None = None,
) -> SaveResult:
    """
    Save a marking sheet for one class and date.

    Raises:
        FutureDateError: If the date is after today
        NotFoundError: If the class is not in the caller's school
        StudentNotInClassError: If a mark references a student outside the roster
    """
    today = today or utcnow().date()
    if data.date > today:
        raise FutureDateError(data.date)

    students = await _load_roster(db, actor.school_id, data.class_id)
    roster_ids = {s.id for s in students}

    outsiders = {m.student_id for m in data.marks} - roster_ids
    if outsiders:
        raise StudentNotInClassError(outsiders)

    existing = {
        r.student_id: r
        for r in await repository.list_for_class_date(db, actor.school_id, data.class_id, data.date)
    }

    now = utcnow()
    saved = skipped = 0

    try:
        for mark in data.marks:
            if mark.status is None:
                skipped += 1
                continue

            record = existing.get(mark.student_id)
            if record is not None:
                record.status = mark.status
                record.notes = mark.notes
                record.marked_by = actor.id
                record.marked_at = now
                record.updated_at = now
            else:
                record = repository.add_record(
                    db,
                    AttendanceRecord(
                        school_id=actor.school_id,
                        class_id=data.class_id,
                        student_id=mark.student_id,
                        date=data.date,
                        status=mark.status,
                        notes=mark.notes,
                        marked_by=actor.id,
                        marked_at=now,
                    ),
                )
                existing[mark.student_id] = record
            saved += 1

        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        f"User {actor.id} saved attendance for class {data.class_id} on {data.date}: "
        f"{saved} saved, {skipped} skipped"
    )

    records = list(
        await repository.list_for_class_date(db, actor.school_id, data.class_id, data.date)
    )
    await event_bus.publish_updated(ATTENDANCE_COLLECTION, f"{data.class_id}:{data.date.isoformat()}")

    return SaveResult(
        saved=saved,
        skipped=skipped,
        records=records,
        stats=summarize([s.id for s in students], records),
    )


async def get_student_history(
    db: AsyncSession,
    actor: CurrentUser,
    student_id: str,
    start: date | None = None,
    end: date | None = None,
) -> tuple[list[AttendanceRecord], dict[str, int]]:
    """
    A student's attendance history.

    Students may only read their own history and parents only their children's.
    """
    if actor.role == UserRole.STUDENT.value and actor.id != student_id:
        raise NotFoundError("Student", student_id)
    if actor.role == UserRole.PARENT.value:
        parent = await UserRepository.get_in_school(db, actor.school_id, actor.id)
        if parent is None or student_id not in (parent.children_ids or []):
            raise NotFoundError("Student", student_id)

    student = await UserRepository.get_in_school(db, actor.school_id, student_id)
    if student is None or student.role != UserRole.STUDENT:
        raise NotFoundError("Student", student_id)

    records = list(await repository.list_for_student(db, actor.school_id, student_id, start, end))
    stats = {status.value: 0 for status in AttendanceStatus}
    for record in records:
        stats[AttendanceStatus(record.status).value] += 1
    stats["total"] = len(records)
    return records, stats

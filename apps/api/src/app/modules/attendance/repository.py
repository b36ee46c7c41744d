"""
Attendance Repository

Database operations for attendance records.
"""

import logging
from collections.abc import Sequence
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.attendance.models import AttendanceRecord

logger = logging.getLogger(__name__)


async def list_for_class_date(
    db: AsyncSession,
    school_id: str,
    class_id: str,
    on_date: date,
) -> Sequence[AttendanceRecord]:
    """Get every record for one class on one date."""
    result = await db.execute(
        select(AttendanceRecord).where(
            AttendanceRecord.school_id == str(school_id),
            AttendanceRecord.class_id == str(class_id),
            AttendanceRecord.date == on_date,
        )
    )
    return result.scalars().all()


async def list_for_student(
    db: AsyncSession,
    school_id: str,
    student_id: str,
    start: date | None = None,
    end: date | None = None,
) -> Sequence[AttendanceRecord]:
    """Get a student's records, newest first, optionally within a date range."""
    query = select(AttendanceRecord).where(
        AttendanceRecord.school_id == str(school_id),
        AttendanceRecord.student_id == str(student_id),
    )
    if start:
        query = query.where(AttendanceRecord.date >= start)
    if end:
        query = query.where(AttendanceRecord.date <= end)

    result = await db.execute(query.order_by(AttendanceRecord.date.desc()))
    return result.scalars().all()


def add_record(db: AsyncSession, record: AttendanceRecord) -> AttendanceRecord:
    """Stage a new record; the caller commits the whole batch."""
    db.add(record)
    return record

"""
Attendance Models
"""

import datetime as dt
from enum import Enum

from sqlalchemy import Date, DateTime, ForeignKey, Index, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import ENUM, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.modules.shared import BaseModel


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"


class AttendanceRecord(BaseModel):
    """
    One student's attendance in one class on one calendar date.

    At most one record exists per (class, student, date).
    """

    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("class_id", "student_id", "date", name="uq_attendance_class_student_date"),
        Index("ix_attendance_class_date", "class_id", "date"),
    )

    school_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("schools.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    class_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("classes.id", ondelete="CASCADE"),
        nullable=False,
    )
    student_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    status: Mapped[AttendanceStatus] = mapped_column(
        ENUM(
            AttendanceStatus,
            name="attendance_status",
            create_type=True,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    marked_by: Mapped[str] = mapped_column(UUID(as_uuid=False), nullable=False)
    marked_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<AttendanceRecord(student={self.student_id}, date={self.date}, status={self.status})>"

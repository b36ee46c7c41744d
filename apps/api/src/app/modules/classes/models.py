"""
Class Models
"""

from typing import Any

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.modules.shared import BaseModel

GRADE_LEVELS: tuple[str, ...] = ("Kindergarten", *(f"Grade {n}" for n in range(1, 13)))

DEFAULT_CAPACITY = 30
MIN_CAPACITY = 1
MAX_CAPACITY = 100


class SchoolClass(BaseModel):
    """A class section within a school (e.g. Grade 5, section B)."""

    __tablename__ = "classes"

    school_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("schools.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    section: Mapped[str | None] = mapped_column(String(20), nullable=True)
    grade: Mapped[str] = mapped_column(String(20), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=DEFAULT_CAPACITY)
    room: Mapped[str | None] = mapped_column(String(50), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    academic_year: Mapped[str | None] = mapped_column(String(20), nullable=True)
    subjects: Mapped[list[Any]] = mapped_column(JSONB, nullable=False, default=list)

    # No FK: users.class_id already references this table.
    class_teacher_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        nullable=True,
        index=True,
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<SchoolClass(id={self.id}, name={self.name}, grade={self.grade})>"

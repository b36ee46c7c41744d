"""
Class Schemas
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.modules.classes.models import DEFAULT_CAPACITY, GRADE_LEVELS, MAX_CAPACITY, MIN_CAPACITY
from app.modules.shared.validators import reject_null


def _check_grade(value: str | None) -> str | None:
    if value is not None and value not in GRADE_LEVELS:
        raise ValueError(f"grade must be one of: {', '.join(GRADE_LEVELS)}")
    return value


class ClassCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    section: str | None = Field(None, max_length=20)
    grade: str
    capacity: int = Field(DEFAULT_CAPACITY, ge=MIN_CAPACITY, le=MAX_CAPACITY)
    room: str | None = Field(None, max_length=50)
    description: str | None = Field(None, max_length=1000)
    academic_year: str | None = Field(None, max_length=20)
    subjects: list[str] = Field(default_factory=list)
    class_teacher_id: str | None = None

    validate_grade = field_validator("grade")(_check_grade)


class ClassUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    section: str | None = Field(None, max_length=20)
    grade: str | None = None
    capacity: int | None = Field(None, ge=MIN_CAPACITY, le=MAX_CAPACITY)
    room: str | None = Field(None, max_length=50)
    description: str | None = Field(None, max_length=1000)
    academic_year: str | None = Field(None, max_length=20)
    subjects: list[str] | None = None
    class_teacher_id: str | None = None
    is_active: bool | None = None

    validate_grade = field_validator("grade")(_check_grade)
    not_null = field_validator("name", "grade", "capacity", "subjects", "is_active")(reject_null)


class ClassResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    school_id: str
    name: str
    section: str | None = None
    grade: str
    capacity: int
    room: str | None = None
    description: str | None = None
    academic_year: str | None = None
    subjects: list[str] = Field(default_factory=list)
    class_teacher_id: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ClassListResponse(BaseModel):
    items: list[ClassResponse]
    total: int

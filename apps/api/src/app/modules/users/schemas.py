"""
User Schemas

Pydantic schemas for member forms and responses. Validation happens here,
before any write reaches the database.
"""

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.modules.shared.validators import reject_null
from app.modules.users.models import AuthStatus, UserRole

Gender = Literal["male", "female", "other"]


class Address(BaseModel):
    street: str | None = Field(None, max_length=200)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    country: str | None = Field(None, max_length=100)
    zip_code: str | None = Field(None, max_length=20)


class ProfileData(BaseModel):
    """Profile fields required when a member is created."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=30)
    date_of_birth: date | None = None
    gender: Gender | None = None
    avatar: str | None = Field(None, max_length=500)
    avatar_path: str | None = Field(None, max_length=500)
    address: Address | None = None


class ProfileUpdate(BaseModel):
    """Partial profile; only provided keys are merged."""

    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=30)
    date_of_birth: date | None = None
    gender: Gender | None = None
    avatar: str | None = Field(None, max_length=500)
    avatar_path: str | None = Field(None, max_length=500)
    address: Address | None = None


class MemberCreate(BaseModel):
    """Create form shared by students, teachers, parents and staff."""

    email: EmailStr
    profile: ProfileData
    role: UserRole | None = None
    class_id: str | None = None
    parent_ids: list[str] = Field(default_factory=list)
    children_ids: list[str] = Field(default_factory=list)
    employee_id: str | None = Field(None, max_length=50)
    admission_number: str | None = Field(None, max_length=50)


class MemberUpdate(BaseModel):
    """Edit form; omitted fields are left untouched."""

    email: EmailStr | None = None
    profile: ProfileUpdate | None = None
    role: UserRole | None = None
    class_id: str | None = None
    parent_ids: list[str] | None = None
    children_ids: list[str] | None = None
    employee_id: str | None = Field(None, max_length=50)
    admission_number: str | None = Field(None, max_length=50)
    is_active: bool | None = None

    not_null = field_validator("email", "role", "parent_ids", "children_ids", "is_active")(reject_null)


class MemberResponse(BaseModel):
    """Persisted member document. The temporary credential is never exposed."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    school_id: str | None
    email: str
    role: UserRole
    profile: dict[str, Any]
    class_id: str | None = None
    parent_ids: list[str] = Field(default_factory=list)
    children_ids: list[str] = Field(default_factory=list)
    employee_id: str | None = None
    admission_number: str | None = None
    is_active: bool
    auth_status: AuthStatus
    created_at: datetime
    updated_at: datetime


class MemberListResponse(BaseModel):
    items: list[MemberResponse]
    total: int

"""Authentication schemas."""

from typing import Any, Literal

from pydantic import BaseModel, EmailStr, Field, model_validator

from app.modules.schools.schemas import SchoolResponse
from app.modules.users.schemas import MemberResponse, ProfileUpdate

MIN_PASSWORD_LENGTH = 6


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    """
    Self-registration of a school administrator.

    Creates the sign-in identity, the administrator's user document and the
    school in one transaction.
    """

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str | None = Field(None, max_length=30)
    school_name: str = Field(..., min_length=1, max_length=200)
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=128)
    confirm_password: str
    role: Literal["school_admin"] = "school_admin"

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")
        return self


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenResponse(BaseModel):
    """Token response schema."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginResponse(BaseModel):
    """Login response schema."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: MemberResponse
    school: SchoolResponse | None = None


class ProfileUpdateRequest(BaseModel):
    profile: ProfileUpdate


class SessionSnapshotResponse(BaseModel):
    identity: dict[str, Any] | None = None
    user: dict[str, Any] | None = None
    school: dict[str, Any] | None = None
    is_loading: bool

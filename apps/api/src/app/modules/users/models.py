"""
User Models

Tenant member documents. Every user belongs to exactly one school and has one
role; role-specific fields (class, parents, children, employee id, admission
number) live on the same row.
"""

from enum import Enum
from typing import Any

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import ENUM, JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.modules.shared import BaseModel


class UserRole(str, Enum):
    """User roles in the system."""

    SCHOOL_ADMIN = "school_admin"
    SUB_ADMIN = "sub_admin"
    TEACHER = "teacher"
    STUDENT = "student"
    PARENT = "parent"
    RECEPTIONIST = "receptionist"
    ACCOUNTANT = "accountant"
    LIBRARIAN = "librarian"


class AuthStatus(str, Enum):
    """Provisioning state of the user's sign-in identity."""

    PENDING = "pending"
    COMPLETE = "complete"
    ERROR = "error"


ADMIN_ROLES = (UserRole.SCHOOL_ADMIN, UserRole.SUB_ADMIN)
STAFF_ROLES = (
    UserRole.SUB_ADMIN,
    UserRole.RECEPTIONIST,
    UserRole.ACCOUNTANT,
    UserRole.LIBRARIAN,
)


def _enum_values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class User(BaseModel):
    """
    A member of a school.

    Admin-created users start with ``auth_status=pending`` and a one-time
    ``temp_password``; the user-creation handler provisions the sign-in
    identity and clears the temporary password whatever the outcome.
    Users are never hard-deleted, only deactivated.
    """

    __tablename__ = "users"

    school_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("schools.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        index=True,
        nullable=False,
    )

    role: Mapped[UserRole] = mapped_column(
        ENUM(UserRole, name="user_role", create_type=True, values_callable=_enum_values),
        nullable=False,
        index=True,
    )

    # first_name, last_name, phone, date_of_birth, gender, avatar,
    # avatar_path, address{street, city, state, country, zip_code}
    profile: Mapped[dict[str, Any]] = mapped_column(
        JSONB,
        nullable=False,
        default=dict,
    )

    # Students only
    class_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("classes.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    admission_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    parent_ids: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)

    # Parents only
    children_ids: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)

    # Teachers and staff
    employee_id: Mapped[str | None] = mapped_column(String(50), nullable=True)

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    # Identity provisioning
    auth_status: Mapped[AuthStatus] = mapped_column(
        ENUM(AuthStatus, name="auth_status", create_type=True, values_callable=_enum_values),
        nullable=False,
        default=AuthStatus.COMPLETE,
    )
    temp_password: Mapped[str | None] = mapped_column(String(64), nullable=True)
    temp_password_sent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    error_log: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

    @property
    def first_name(self) -> str:
        return (self.profile or {}).get("first_name", "")

    @property
    def last_name(self) -> str:
        return (self.profile or {}).get("last_name", "")

    @property
    def full_name(self) -> str:
        """Return user's full name."""
        return f"{self.first_name} {self.last_name}".strip()

"""
School Models

Each school is a tenant. A school is created exactly once, by the sign-up of
its administrator, and its id is that administrator's identity id.
"""

from enum import Enum
from typing import Any

from sqlalchemy import Boolean, String, Text
from sqlalchemy.dialects.postgresql import ENUM, JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.modules.shared import BaseModel


class SubscriptionTier(str, Enum):
    """Billing tier of a school."""

    FREE = "free"
    BASIC = "basic"
    PREMIUM = "premium"


DEFAULT_SCHOOL_SETTINGS: dict[str, Any] = {
    "allow_parent_messages": True,
    "attendance_notifications": True,
    "announcement_emails": True,
}


class School(BaseModel):
    """School tenant model."""

    __tablename__ = "schools"

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        index=True,
    )
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Equal to the school id for self-registered schools. No FK: the admin's
    # user row references this school, and both are inserted together.
    admin_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        nullable=False,
        index=True,
    )

    settings: Mapped[dict[str, Any]] = mapped_column(
        JSONB,
        nullable=False,
        default=lambda: dict(DEFAULT_SCHOOL_SETTINGS),
    )
    subscription_tier: Mapped[SubscriptionTier] = mapped_column(
        ENUM(
            SubscriptionTier,
            name="subscription_tier",
            create_type=True,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=SubscriptionTier.FREE,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<School(id={self.id}, name={self.name})>"

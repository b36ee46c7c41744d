"""
Email Log Models

Append-only audit trail of every email send attempt. Rows are pruned by the
daily cleanup job once they pass the retention window.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.dialects.postgresql import ENUM, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.modules.shared import BaseModel, utcnow


class EmailType(str, Enum):
    WELCOME = "welcome"
    PASSWORD_RESET = "password_reset"
    ANNOUNCEMENT = "announcement"
    BULK_NOTIFICATION = "bulk_notification"


class EmailLog(BaseModel):
    """One send attempt to one recipient."""

    __tablename__ = "email_logs"

    # No foreign keys: logs outlive the users and announcements they mention.
    school_id: Mapped[str | None] = mapped_column(UUID(as_uuid=False), nullable=True, index=True)
    user_id: Mapped[str | None] = mapped_column(UUID(as_uuid=False), nullable=True, index=True)
    announcement_id: Mapped[str | None] = mapped_column(UUID(as_uuid=False), nullable=True)

    email: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[EmailType] = mapped_column(
        ENUM(
            EmailType,
            name="email_type",
            create_type=True,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    role: Mapped[str | None] = mapped_column(String(50), nullable=True)
    subject: Mapped[str | None] = mapped_column(String(500), nullable=True)
    sent_by: Mapped[str | None] = mapped_column(UUID(as_uuid=False), nullable=True)

    success: Mapped[bool] = mapped_column(Boolean, nullable=False)
    message_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)

    sent_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<EmailLog(type={self.type}, email={self.email}, success={self.success})>"

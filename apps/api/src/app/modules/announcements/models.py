"""
Announcement Models
"""

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import ENUM, JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.modules.shared import BaseModel, utcnow


class AnnouncementPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AnnouncementStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


def _values(enum_cls):
    return [m.value for m in enum_cls]


class Announcement(BaseModel):
    """
    A notice posted to some or all members of a school.

    ``target_audience`` holds group or role names; an empty list means
    everyone. ``email_stats`` is written once by the announcement email
    fan-out: {total_sent, successful, failed, sent_at}.
    """

    __tablename__ = "announcements"

    school_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("schools.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id: Mapped[str] = mapped_column(UUID(as_uuid=False), nullable=False, index=True)
    author_name: Mapped[str | None] = mapped_column(String(200), nullable=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    target_audience: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)

    priority: Mapped[AnnouncementPriority] = mapped_column(
        ENUM(AnnouncementPriority, name="announcement_priority", create_type=True, values_callable=_values),
        nullable=False,
        default=AnnouncementPriority.MEDIUM,
    )
    status: Mapped[AnnouncementStatus] = mapped_column(
        ENUM(AnnouncementStatus, name="announcement_status", create_type=True, values_callable=_values),
        nullable=False,
        default=AnnouncementStatus.PUBLISHED,
    )

    publish_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    expiry_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # [{name, url}]
    attachments: Mapped[list[dict[str, Any]]] = mapped_column(JSONB, nullable=False, default=list)

    email_stats: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)

    def __repr__(self) -> str:
        return f"<Announcement(id={self.id}, title={self.title})>"

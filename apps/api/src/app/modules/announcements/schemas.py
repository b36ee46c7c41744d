"""
Announcement Schemas
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.modules.announcements.audience import VALID_AUDIENCE_VALUES
from app.modules.announcements.models import AnnouncementPriority, AnnouncementStatus
from app.modules.shared.validators import reject_null


def _check_audience(value: list[str] | None) -> list[str] | None:
    if value is None:
        return value
    normalized = [v.strip().lower() for v in value if v and v.strip()]
    unknown = [v for v in normalized if v not in VALID_AUDIENCE_VALUES]
    if unknown:
        raise ValueError(f"Unknown audience: {', '.join(unknown)}")
    return normalized


class Attachment(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    url: str = Field(..., min_length=1, max_length=1000)


class AnnouncementCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    target_audience: list[str] = Field(default_factory=list)
    priority: AnnouncementPriority = AnnouncementPriority.MEDIUM
    status: AnnouncementStatus = AnnouncementStatus.PUBLISHED
    expiry_date: datetime | None = None
    attachments: list[Attachment] = Field(default_factory=list)

    validate_audience = field_validator("target_audience")(_check_audience)


class AnnouncementUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    content: str | None = Field(None, min_length=1)
    target_audience: list[str] | None = None
    priority: AnnouncementPriority | None = None
    status: AnnouncementStatus | None = None
    expiry_date: datetime | None = None
    attachments: list[Attachment] | None = None

    validate_audience = field_validator("target_audience")(_check_audience)
    not_null = field_validator(
        "title", "content", "target_audience", "priority", "status", "attachments"
    )(reject_null)


class AuthorInfo(BaseModel):
    id: str
    name: str | None = None
    role: str | None = None
    avatar: str | None = None


class AnnouncementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    school_id: str
    author_id: str
    author_name: str | None = None
    author: AuthorInfo | None = None
    title: str
    content: str
    target_audience: list[str]
    priority: AnnouncementPriority
    status: AnnouncementStatus
    publish_date: datetime
    expiry_date: datetime | None = None
    attachments: list[dict[str, Any]] = Field(default_factory=list)
    email_stats: dict[str, Any] | None = None
    created_at: datetime
    updated_at: datetime


class AnnouncementListResponse(BaseModel):
    items: list[AnnouncementResponse]
    total: int

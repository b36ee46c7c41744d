"""
Notification Schemas
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.modules.notifications.models import EmailType


class PasswordResetEmailRequest(BaseModel):
    email: EmailStr
    reset_link: str = Field(..., min_length=1, max_length=2000)


class PasswordResetEmailResponse(BaseModel):
    success: bool


class BulkRecipient(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=200)
    user_id: str | None = None


class BulkNotificationRequest(BaseModel):
    recipients: list[BulkRecipient] = Field(..., min_length=1, max_length=1000)
    subject: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    school_id: str


class BulkNotificationResponse(BaseModel):
    total_sent: int
    successful: int
    failed: int


class EmailLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    type: EmailType
    role: str | None = None
    user_id: str | None = None
    announcement_id: str | None = None
    subject: str | None = None
    sent_by: str | None = None
    success: bool
    message_id: str | None = None
    error: str | None = None
    sent_at: datetime


class EmailLogListResponse(BaseModel):
    items: list[EmailLogResponse]
    total: int

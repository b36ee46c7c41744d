"""
School Schemas
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.modules.schools.models import SubscriptionTier


class SchoolUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=30)
    address: str | None = Field(None, max_length=500)
    settings: dict[str, Any] | None = None
    subscription_tier: SubscriptionTier | None = None


class SchoolResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    admin_id: str
    settings: dict[str, Any]
    subscription_tier: SubscriptionTier
    is_active: bool
    created_at: datetime
    updated_at: datetime

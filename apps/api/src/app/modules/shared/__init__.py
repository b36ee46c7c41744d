"""
Shared building blocks for feature modules: the ORM base model and the
service error hierarchy used at every router boundary.
"""

from app.modules.shared.errors import (
    ForbiddenError,
    NotFoundError,
    ServiceError,
    ValidationFailedError,
    to_http_exception,
)
from app.modules.shared.models import BaseModel, utcnow
from app.modules.shared.validators import reject_null

__all__ = [
    "BaseModel",
    "utcnow",
    "ServiceError",
    "NotFoundError",
    "ForbiddenError",
    "ValidationFailedError",
    "to_http_exception",
    "reject_null",
]

"""
Notifications Router

On-demand email operations:

- POST /notifications/password-reset  - Send a password reset email
- POST /notifications/bulk            - Send one message to many recipients (admins)
- GET  /notifications/logs            - Recent delivery log of the caller's school (admins)
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser, get_current_user
from app.core.database import get_db
from app.core.rate_limit import enforce_rate_limit
from app.modules.notifications import service
from app.modules.notifications.models import EmailType
from app.modules.notifications.schemas import (
    BulkNotificationRequest,
    BulkNotificationResponse,
    EmailLogListResponse,
    EmailLogResponse,
    PasswordResetEmailRequest,
    PasswordResetEmailResponse,
)
from app.modules.shared import ServiceError, to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter()

# (limit, window_seconds)
RATE_LIMIT_PASSWORD_RESET = (5, 3600)
RATE_LIMIT_BULK = (10, 3600)


def _internal_error(e: Exception, action: str) -> HTTPException:
    logger.exception(f"Error {action}: {e}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": "INTERNAL_ERROR", "message": "An unexpected error occurred."},
    )


@router.post("/password-reset", response_model=PasswordResetEmailResponse)
async def send_password_reset_email(
    data: PasswordResetEmailRequest,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> PasswordResetEmailResponse:
    """Send the password reset template to an existing account."""
    await enforce_rate_limit(f"notifications:reset:{data.email.lower()}", *RATE_LIMIT_PASSWORD_RESET)

    try:
        success = await service.send_password_reset_email(db, user, data.email, data.reset_link)
        return PasswordResetEmailResponse(success=success)
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        raise _internal_error(e, "sending password reset email") from e


@router.post("/bulk", response_model=BulkNotificationResponse)
async def send_bulk_notification(
    data: BulkNotificationRequest,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> BulkNotificationResponse:
    """
    Send a bulk notification.

    **Access:** school_admin or sub_admin of the target school
    """
    await enforce_rate_limit(f"notifications:bulk:{user.id}", *RATE_LIMIT_BULK)

    try:
        result = await service.send_bulk_notification(db, user, data)
        return BulkNotificationResponse(
            total_sent=result.total_sent,
            successful=result.successful,
            failed=result.failed,
        )
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        raise _internal_error(e, "sending bulk notification") from e


@router.get("/logs", response_model=EmailLogListResponse)
async def list_email_logs(
    email_type: EmailType | None = Query(None, alias="type"),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> EmailLogListResponse:
    try:
        logs = await service.list_email_logs(db, user, email_type, limit)
    except ServiceError as e:
        raise to_http_exception(e) from e
    return EmailLogListResponse(
        items=[EmailLogResponse.model_validate(log) for log in logs],
        total=len(logs),
    )

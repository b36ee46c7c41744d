"""
Notification Service Layer

The two on-demand email operations:

- Password reset: any signed-in caller may request a reset email for an
  existing account.
- Bulk notification: school administrators send one message to a list of
  recipients. The role and tenant checks run before anything is sent.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import ADMIN_ROLES, CurrentUser
from app.core.email import send_email
from app.modules.notifications import repository, templates
from app.modules.notifications.models import EmailLog, EmailType
from app.modules.notifications.schemas import BulkNotificationRequest, BulkRecipient
from app.modules.notifications.triggers import send_to_recipients
from app.modules.schools.repository import SchoolRepository
from app.modules.shared import ForbiddenError, NotFoundError
from app.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)


class PermissionDeniedError(ForbiddenError):
    def __init__(self):
        super().__init__("Only school administrators can send bulk notifications.")


@dataclass
class BulkResult:
    total_sent: int
    successful: int
    failed: int


async def send_password_reset_email(
    db: AsyncSession,
    actor: CurrentUser,
    email: str,
    reset_link: str,
) -> bool:
    """
    Send a password reset email to an existing account.

    Returns:
        Whether the email was delivered to the transport

    Raises:
        NotFoundError: If no user has this email
    """
    user = await UserRepository.get_by_email(db, email)
    if user is None:
        logger.warning(f"Password reset requested by {actor.id} for unknown email")
        raise NotFoundError("User")

    rendered = templates.password_reset(user, reset_link)
    result = await send_email(user.email, rendered.subject, rendered.html)

    repository.add_log(
        db,
        email=user.email,
        email_type=EmailType.PASSWORD_RESET,
        result=result,
        school_id=user.school_id,
        user_id=user.id,
        role=user.role.value,
        sent_by=actor.id,
    )
    await db.commit()

    logger.info(f"Password reset email for user {user.id}: success={result.success}")
    return result.success


async def send_bulk_notification(
    db: AsyncSession,
    actor: CurrentUser,
    data: BulkNotificationRequest,
) -> BulkResult:
    """
    Send one message to many recipients.

    Raises:
        PermissionDeniedError: If the caller is not an administrator of the school
        NotFoundError: If the school does not exist
    """
    if actor.role not in ADMIN_ROLES or actor.school_id != data.school_id:
        logger.warning(
            f"Bulk notification denied for user {actor.id} (role={actor.role}, "
            f"school={actor.school_id}, target={data.school_id})"
        )
        raise PermissionDeniedError()

    school = await SchoolRepository.get_by_id(db, data.school_id)
    if school is None:
        raise NotFoundError("School", data.school_id)

    def render(recipient: BulkRecipient):
        return templates.bulk_notification(data.subject, data.content, school, recipient.name)

    results = await send_to_recipients(
        [(str(r.email), r) for r in data.recipients],
        render,
    )

    for recipient, result in zip(data.recipients, results, strict=True):
        repository.add_log(
            db,
            email=str(recipient.email),
            email_type=EmailType.BULK_NOTIFICATION,
            result=result,
            school_id=school.id,
            user_id=recipient.user_id,
            subject=data.subject,
            sent_by=actor.id,
        )
    await db.commit()

    successful = sum(1 for r in results if r.success)
    logger.info(
        f"Bulk notification by {actor.id} to {len(results)} recipients: {successful} delivered"
    )
    return BulkResult(total_sent=len(results), successful=successful, failed=len(results) - successful)


async def list_email_logs(
    db: AsyncSession,
    actor: CurrentUser,
    email_type: EmailType | None = None,
    limit: int = 100,
) -> list[EmailLog]:
    """Recent delivery log of the caller's school (administrators only)."""
    if actor.role not in ADMIN_ROLES:
        raise ForbiddenError()
    return list(await repository.list_for_school(db, actor.school_id, email_type, limit))

"""
Document Creation Handlers

Background handlers run by the change feed when documents are created:

1. New user:
   - Only runs for users whose identity is still ``pending``
   - Provisions the sign-in identity from the temporary credential and, in the
     same commit, marks the user ``complete`` and clears the credential
   - On failure marks the user ``error`` with the message and clears the
     credential anyway (no retry)
   - Sends the role-specific welcome email and logs the attempt, including
     a failed entry when the school can't be found

2. New announcement:
   - Only published announcements are emailed
   - Resolves the audience to active members of the school
   - Sends to every recipient concurrently; one failure never blocks others
   - Logs one entry per recipient and stores delivery counts on the announcement

Each handler opens its own database session.
"""

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import async_session_maker
from app.core.email import EmailResult, send_email
from app.core.events import event_bus
from app.modules.announcements.audience import resolve_audience_roles
from app.modules.announcements.models import Announcement, AnnouncementStatus
from app.modules.announcements.repository import AnnouncementRepository
from app.modules.auth.repository import AuthAccountRepository
from app.modules.notifications import repository, templates
from app.modules.notifications.models import EmailType
from app.modules.schools.models import School
from app.modules.schools.repository import SchoolRepository
from app.modules.shared import utcnow
from app.modules.users.models import AuthStatus, User, UserRole
from app.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"
ANNOUNCEMENTS_COLLECTION = "announcements"


class ProvisioningError(Exception):
    """Raised when a pending user cannot be given a sign-in identity."""


async def _provision_identity(db: AsyncSession, user: User) -> None:
    if not user.temp_password:
        raise ProvisioningError("No temporary password was set for this user.")

    await AuthAccountRepository.create(
        db,
        account_id=user.id,
        email=user.email,
        password=user.temp_password,
        display_name=user.full_name or None,
    )
    await UserRepository.update(
        db,
        user,
        {
            "auth_status": AuthStatus.COMPLETE,
            "temp_password": None,
            "error_log": None,
        },
    )


async def _record_provisioning_failure(db: AsyncSession, user_id: str, error: Exception) -> None:
    await db.rollback()

    # Re-read after rollback; the in-memory instance is expired
    user = await UserRepository.get_by_id(db, user_id)
    if user is None:
        return

    await UserRepository.update(
        db,
        user,
        {
            "auth_status": AuthStatus.ERROR,
            "error_log": str(error),
            "temp_password": None,
        },
    )
    await db.commit()


async def _welcome_context(db: AsyncSession, user: User) -> dict[str, Any]:
    """Extra template arguments for students (parent emails) and parents (children names)."""
    if user.role == UserRole.STUDENT:
        parents = await UserRepository.get_many(db, user.parent_ids or [])
        return {"parent_emails": [p.email for p in parents]}
    if user.role == UserRole.PARENT:
        children = await UserRepository.get_many(db, user.children_ids or [])
        return {"children_names": [c.full_name for c in children]}
    return {}


async def handle_new_user_creation(user_id: str) -> dict[str, Any]:
    """
    Provision and welcome a newly created user.

    Returns:
        Dict with the handler outcome (used by logs and tests)
    """
    async with async_session_maker() as db:
        user = await UserRepository.get_by_id(db, user_id)

        if user is None:
            logger.warning(f"User {user_id} not found, skipping provisioning")
            return {"user_id": user_id, "status": "skipped", "reason": "not_found"}

        if user.auth_status != AuthStatus.PENDING:
            logger.debug(f"User {user_id} is {user.auth_status}, nothing to provision")
            return {"user_id": user_id, "status": "skipped", "reason": "not_pending"}

        temp_password = user.temp_password

        try:
            await _provision_identity(db, user)
            await db.commit()
        except Exception as e:
            logger.error(f"Error provisioning identity for user {user_id}: {e}", exc_info=True)
            await _record_provisioning_failure(db, user_id, e)
            await event_bus.publish_updated(USERS_COLLECTION, user_id)
            return {"user_id": user_id, "status": "error", "error": str(e)}

        logger.info(f"Provisioned identity for user {user_id} ({user.role.value})")
        await event_bus.publish_updated(USERS_COLLECTION, user_id)

        school = await SchoolRepository.get_by_id(db, user.school_id) if user.school_id else None
        if school is None:
            logger.error(f"School {user.school_id} not found for user {user_id}, welcome email not sent")
            repository.add_log(
                db,
                email=user.email,
                email_type=EmailType.WELCOME,
                result=EmailResult(success=False, error="school not found"),
                school_id=user.school_id,
                user_id=user.id,
                role=user.role.value,
            )
            await db.commit()
            return {"user_id": user_id, "status": "provisioned", "email_sent": False}

        try:
            template = templates.welcome_template_for(user.role.value)
            rendered = template(user, school, temp_password, **await _welcome_context(db, user))
            result = await send_email(user.email, rendered.subject, rendered.html)
        except Exception as e:
            logger.error(f"Error building welcome email for user {user_id}: {e}", exc_info=True)
            result = EmailResult(success=False, error=str(e))

        repository.add_log(
            db,
            email=user.email,
            email_type=EmailType.WELCOME,
            result=result,
            school_id=user.school_id,
            user_id=user.id,
            role=user.role.value,
        )
        if result.success:
            user.temp_password_sent = True
        await db.commit()

        return {"user_id": user_id, "status": "provisioned", "email_sent": result.success}


async def send_to_recipients(
    recipients: Sequence[tuple[str, Any]],
    render,
) -> list[EmailResult]:
    """
    Render and send one email per recipient concurrently.

    Args:
        recipients: (email, context) pairs
        render: Callable turning a context into a RenderedEmail

    Returns:
        One EmailResult per recipient, in order
    """

    async def _send_one(email: str, context: Any) -> EmailResult:
        rendered = render(context)
        return await send_email(email, rendered.subject, rendered.html)

    outcomes = await asyncio.gather(
        *(_send_one(email, context) for email, context in recipients),
        return_exceptions=True,
    )
    return [
        outcome if isinstance(outcome, EmailResult) else EmailResult(success=False, error=str(outcome))
        for outcome in outcomes
    ]


async def _announcement_recipients(
    db: AsyncSession,
    announcement: Announcement,
    school: School,
) -> list[User]:
    roles = resolve_audience_roles(announcement.target_audience)
    if roles is not None and not roles:
        return []
    members = await UserRepository.list_by_school(
        db,
        school.id,
        roles=sorted(roles, key=lambda r: r.value) if roles is not None else None,
    )
    return list(members)


async def send_announcement_emails(announcement_id: str) -> dict[str, Any]:
    """
    Email a new announcement to its audience and record delivery counts.

    Returns:
        The email_stats written to the announcement
    """
    async with async_session_maker() as db:
        announcement = await AnnouncementRepository.get_by_id(db, announcement_id)
        if announcement is None:
            logger.warning(f"Announcement {announcement_id} not found, skipping emails")
            return {"announcement_id": announcement_id, "status": "skipped"}

        if announcement.status != AnnouncementStatus.PUBLISHED:
            logger.info(f"Announcement {announcement_id} is {announcement.status.value}, no emails sent")
            return {"announcement_id": announcement_id, "status": "skipped"}

        school = await SchoolRepository.get_by_id(db, announcement.school_id)
        if school is None:
            logger.error(f"School {announcement.school_id} not found for announcement {announcement_id}")
            return {"announcement_id": announcement_id, "status": "skipped"}

        recipients = await _announcement_recipients(db, announcement, school)
        logger.info(f"Sending announcement {announcement_id} to {len(recipients)} recipients")

        results = await send_to_recipients(
            [(u.email, u) for u in recipients],
            lambda u: templates.announcement(announcement, school, u.full_name or u.email),
        )

        for user, result in zip(recipients, results, strict=True):
            repository.add_log(
                db,
                email=user.email,
                email_type=EmailType.ANNOUNCEMENT,
                result=result,
                school_id=school.id,
                user_id=user.id,
                role=user.role.value,
                announcement_id=announcement.id,
            )

        successful = sum(1 for r in results if r.success)
        stats = {
            "total_sent": len(results),
            "successful": successful,
            "failed": len(results) - successful,
            "sent_at": utcnow().isoformat(),
        }

        await AnnouncementRepository.update(db, announcement, {"email_stats": stats})
        await db.commit()

        logger.info(
            f"Announcement {announcement_id} emails: {successful}/{len(results)} delivered"
        )

    await event_bus.publish_updated(ANNOUNCEMENTS_COLLECTION, announcement_id)
    return stats


def register_notification_triggers() -> None:
    """Attach the creation handlers to the change feed. Call once at startup."""
    event_bus.on_create(USERS_COLLECTION, handle_new_user_creation)
    event_bus.on_create(ANNOUNCEMENTS_COLLECTION, send_announcement_emails)

"""
Email Log Repository
"""

import logging
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.email import EmailResult
from app.modules.notifications.models import EmailLog, EmailType
from app.modules.shared import utcnow

logger = logging.getLogger(__name__)


def add_log(
    db: AsyncSession,
    *,
    email: str,
    email_type: EmailType,
    result: EmailResult,
    school_id: str | None = None,
    user_id: str | None = None,
    role: str | None = None,
    announcement_id: str | None = None,
    subject: str | None = None,
    sent_by: str | None = None,
) -> EmailLog:
    """Stage one audit entry; the caller commits."""
    log = EmailLog(
        email=email,
        type=email_type,
        school_id=school_id,
        user_id=user_id,
        role=role,
        announcement_id=announcement_id,
        subject=subject,
        sent_by=sent_by,
        success=result.success,
        message_id=result.message_id,
        error=result.error,
        sent_at=utcnow(),
    )
    db.add(log)
    return log


async def list_for_school(
    db: AsyncSession,
    school_id: str,
    email_type: EmailType | None = None,
    limit: int = 100,
) -> Sequence[EmailLog]:
    query = select(EmailLog).where(EmailLog.school_id == str(school_id))
    if email_type is not None:
        query = query.where(EmailLog.type == email_type)
    result = await db.execute(query.order_by(EmailLog.sent_at.desc()).limit(limit))
    return result.scalars().all()


async def delete_older_than_batch(db: AsyncSession, cutoff: datetime, batch_size: int) -> int:
    """
    Delete up to ``batch_size`` logs sent before ``cutoff``.

    Returns:
        Number of rows deleted
    """
    ids = (
        await db.execute(
            select(EmailLog.id).where(EmailLog.sent_at < cutoff).limit(batch_size)
        )
    ).scalars().all()

    if not ids:
        return 0

    await db.execute(delete(EmailLog).where(EmailLog.id.in_(ids)))
    return len(ids)

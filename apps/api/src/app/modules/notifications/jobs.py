"""
Notification Background Jobs

Daily pruning of the email audit log. Logs older than the retention window
(30 days by default) are deleted in batches so a large backlog never holds
one long transaction.

Schedule:
- Runs every day at 02:00 UTC
- Can be triggered manually via /debug/jobs/{job_id}/trigger
"""

import logging
from datetime import timedelta
from typing import Any

from apscheduler.triggers.cron import CronTrigger

from app.core.config import settings
from app.core.database import async_session_maker
from app.core.scheduler import register_job
from app.modules.notifications import repository
from app.modules.shared import utcnow

logger = logging.getLogger(__name__)

CLEANUP_BATCH_SIZE = 500

JOB_ID_CLEANUP_EMAIL_LOGS = "notifications_cleanup_email_logs"


async def cleanup_email_logs(
    retention_days: int | None = None,
    batch_size: int = CLEANUP_BATCH_SIZE,
) -> dict[str, Any]:
    """
    Delete email logs older than the retention window.

    Each batch is committed on its own; the job stops at the first batch
    smaller than ``batch_size``.

    Returns:
        Dict with cutoff, deleted count and number of batches
    """
    retention_days = retention_days or settings.email_log_retention_days
    cutoff = utcnow() - timedelta(days=retention_days)

    deleted = 0
    batches = 0

    async with async_session_maker() as db:
        while True:
            count = await repository.delete_older_than_batch(db, cutoff, batch_size)
            if count == 0:
                break

            await db.commit()
            deleted += count
            batches += 1
            logger.debug(f"Deleted batch of {count} email logs")

            if count < batch_size:
                break

    logger.info(f"Email log cleanup completed. Deleted {deleted} logs older than {cutoff.isoformat()}")

    return {
        "cutoff": cutoff.isoformat(),
        "deleted": deleted,
        "batches": batches,
    }


def register_notification_jobs() -> None:
    """Register notification jobs with the scheduler. Call before start_scheduler()."""
    register_job(
        job_id=JOB_ID_CLEANUP_EMAIL_LOGS,
        func=cleanup_email_logs,
        trigger=CronTrigger(hour=2, minute=0, timezone="UTC"),
    )
    logger.info(f"Registered job: {JOB_ID_CLEANUP_EMAIL_LOGS} (daily at 02:00 UTC)")

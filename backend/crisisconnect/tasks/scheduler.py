"""Background task scheduler for consistency checks."""

import logging
from datetime import UTC, datetime, timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from crisisconnect.config import get_settings
from crisisconnect.database import async_session_maker
from crisisconnect.services.consistency import reconcile_volunteer_task_status

logger = logging.getLogger(__name__)
settings = get_settings()

# Global scheduler instance
scheduler: AsyncIOScheduler | None = None


async def reconcile_task_status_job() -> None:
    """Background job repairing volunteer task_status drift."""
    logger.info("Starting scheduled task status reconciliation")
    try:
        async with async_session_maker() as db:
            repaired = await reconcile_volunteer_task_status(db)
            if repaired:
                logger.info(f"Reconciliation repaired {repaired} volunteer profiles")
    except Exception as e:
        logger.error(f"Task status reconciliation failed: {e}", exc_info=True)


def setup_scheduler() -> AsyncIOScheduler:
    """Set up and start the background task scheduler."""
    global scheduler

    scheduler = AsyncIOScheduler()

    scheduler.add_job(
        reconcile_task_status_job,
        trigger=IntervalTrigger(minutes=settings.consistency_check_interval_minutes),
        next_run_time=datetime.now(UTC) + timedelta(seconds=30),
        id="reconcile_task_status",
        name="Reconcile volunteer task status with tasks",
        replace_existing=True,
    )

    scheduler.start()
    logger.info("Scheduler started")

    return scheduler


def shutdown_scheduler() -> None:
    """Shut down the scheduler gracefully."""
    global scheduler

    if scheduler:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler shut down")
        scheduler = None

"""Background job scheduler for event syncing."""
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from eventdesk.core.auth import AuthContext
from eventdesk.core.config import settings

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


async def sync_job(module):
    """Background sync job. Each run supersedes one still in flight."""
    try:
        outcome = await module.sync(AuthContext.service())
        logger.info(f"Background sync completed: {outcome}")
    except Exception as e:
        logger.error(f"Background sync failed: {e}")


def start_scheduler(module):
    """Start the background scheduler."""
    scheduler.add_job(
        sync_job,
        trigger=IntervalTrigger(minutes=settings.sync_interval_minutes),
        args=[module],
        id="event_sync",
        replace_existing=True,
        max_instances=2,
    )
    scheduler.start()
    logger.info(
        f"Scheduler started, syncing every {settings.sync_interval_minutes} minutes"
    )


def shutdown_scheduler():
    """Graceful shutdown."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
    logger.info("Scheduler shut down")

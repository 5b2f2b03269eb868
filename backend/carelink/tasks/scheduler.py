"""Background scheduler that notices emergency writes made outside the API."""

import logging
from datetime import UTC, datetime

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.ext.asyncio import AsyncSession

from carelink.config import get_settings
from carelink.database import async_session_maker
from carelink.services.emergency_feed import EmergencyFeed
from carelink.services.emergency_feed import feed as emergency_feed
from carelink.services.emergency_store import EmergencyStore

logger = logging.getLogger(__name__)
settings = get_settings()

# Global scheduler instance
scheduler: AsyncIOScheduler | None = None


class ChangeWatcher:
    """
    Detects changes to the emergencies table by polling a fingerprint.

    Writes through the API publish immediately; this catches writers that
    talk to the database directly (other services, manual fixes).
    """

    def __init__(self, feed: EmergencyFeed | None = None):
        self.feed = feed or emergency_feed
        self._last_fingerprint: tuple[int, datetime | None] | None = None

    async def check(self, db: AsyncSession) -> bool:
        """
        Compare the current fingerprint with the last one seen.

        Returns True when a change was detected and a snapshot published.
        The first check only records the baseline.
        """
        fingerprint = await EmergencyStore(db).change_fingerprint()
        previous = self._last_fingerprint
        self._last_fingerprint = fingerprint

        if previous is None or fingerprint == previous:
            return False

        logger.info(f"Emergencies changed ({previous} -> {fingerprint}), publishing snapshot")
        await self.feed.publish(db)
        return True


watcher = ChangeWatcher()


async def watch_emergency_changes_job() -> None:
    """Background job to publish a snapshot when emergencies change."""
    try:
        async with async_session_maker() as db:
            await watcher.check(db)
    except Exception as e:
        logger.error(f"Emergency change check failed: {e}", exc_info=True)


def setup_scheduler() -> AsyncIOScheduler:
    """Set up and start the background task scheduler."""
    global scheduler

    scheduler = AsyncIOScheduler()

    scheduler.add_job(
        watch_emergency_changes_job,
        trigger=IntervalTrigger(seconds=settings.change_watch_interval_seconds),
        next_run_time=datetime.now(UTC),
        id="watch_emergency_changes",
        name="Publish emergency snapshots on out-of-band changes",
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

"""APScheduler job definitions and scheduler management.

Runs ``run_scheduled_scraping`` every ``SCRAPING_INTERVAL_HOURS`` on the
bot's event loop.  An interval of 0 leaves the scheduler stopped.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from scraper_bot.core.config import Settings
from scraper_bot.db.base import StorageAdapter
from scraper_bot.services.pipeline import run_scheduled_scraping
from scraper_bot.services.scraping import ApifyReelsScraper

logger = logging.getLogger(__name__)

JOB_ID = "scheduled_scraping"

# Module-level scheduler instance (singleton)
scheduler = AsyncIOScheduler()


def start_scheduler(
    storage: StorageAdapter,
    scraper: ApifyReelsScraper | None,
    settings: Settings,
) -> bool:
    """Register the scraping job and start the scheduler.

    Must be called from a running event loop.  Returns False when
    scheduled scraping is disabled.
    """
    if settings.SCRAPING_INTERVAL_HOURS <= 0:
        logger.info("scheduler_disabled")
        return False

    scheduler.add_job(
        run_scheduled_scraping,
        IntervalTrigger(hours=settings.SCRAPING_INTERVAL_HOURS),
        kwargs={"storage": storage, "scraper": scraper, "settings": settings},
        id=JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    if not scheduler.running:
        scheduler.start()
    logger.info(
        "scheduler_started",
        extra={
            "interval_hours": settings.SCRAPING_INTERVAL_HOURS,
            "dry_run": settings.SCRAPING_DRY_RUN,
        },
    )
    return True


def shutdown_scheduler() -> None:
    """Shutdown the scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("scheduler_stopped")


def is_scheduler_running() -> bool:
    return scheduler.running

"""Scheduled scraping pipeline.

Walks every active project and scrapes each of its active competitors and
hashtags with ``parse_source``.  A failing source is logged and the run
continues; the overall status becomes ``partial``.

With ``SCRAPING_DRY_RUN`` the sources are listed and logged without
calling Apify.
"""

from __future__ import annotations

import logging
import time
from typing import Any
from uuid import uuid4

from scraper_bot.core.config import Settings
from scraper_bot.db.base import StorageAdapter
from scraper_bot.models.enums import SourceType
from scraper_bot.scheduler.lock import acquire_pipeline_lock, release_pipeline_lock
from scraper_bot.services.parsing import hashtag_target, parse_source
from scraper_bot.services.scraping import ApifyReelsScraper, ScrapeOptions

logger = logging.getLogger(__name__)


async def run_scheduled_scraping(
    storage: StorageAdapter,
    scraper: ApifyReelsScraper | None,
    settings: Settings,
    trigger: str = "scheduler",
) -> dict[str, Any]:
    """Scrape all active sources of all active projects.

    Returns a summary dict; never raises.
    """
    run_id = str(uuid4())

    if not acquire_pipeline_lock(run_id):
        logger.warning(
            "pipeline_already_running",
            extra={"run_id": run_id, "trigger": trigger},
        )
        return {"status": "skipped", "reason": "pipeline_already_running"}

    start_time = time.time()
    dry_run = settings.SCRAPING_DRY_RUN
    options = ScrapeOptions.from_settings(settings)
    has_errors = False
    sources_total = 0
    sources_done = 0
    reels_added = 0

    logger.info(
        "pipeline_start",
        extra={"run_id": run_id, "trigger": trigger, "dry_run": dry_run},
    )

    try:
        if scraper is None and not dry_run:
            logger.error("pipeline_scraper_unavailable", extra={"run_id": run_id})
            return {"run_id": run_id, "status": "failed", "error": "scraper_unavailable"}

        async with storage.opened():
            projects = await storage.get_active_projects()

            for project in projects:
                competitors = await storage.get_competitor_accounts(project.id)
                hashtags = await storage.get_hashtags_by_project_id(project.id)
                sources: list[tuple[SourceType, int, str]] = [
                    (SourceType.competitor, c.id, c.username) for c in competitors
                ] + [
                    (SourceType.hashtag, h.id, hashtag_target(h.hashtag)) for h in hashtags
                ]
                sources_total += len(sources)

                for source_type, source_id, target in sources:
                    if dry_run:
                        logger.info(
                            "pipeline_dry_run_source",
                            extra={
                                "run_id": run_id,
                                "project_id": project.id,
                                "source_type": source_type.value,
                                "target": target,
                            },
                        )
                        sources_done += 1
                        continue

                    try:
                        result = await parse_source(
                            storage,
                            scraper,
                            project.id,
                            source_type,
                            source_id,
                            target,
                            options,
                            run_id=run_id,
                        )
                    except Exception as exc:
                        has_errors = True
                        logger.error(
                            "pipeline_error",
                            extra={
                                "run_id": run_id,
                                "project_id": project.id,
                                "source_type": source_type.value,
                                "source_id": source_id,
                                "error": str(exc),
                            },
                        )
                        continue
                    sources_done += 1
                    reels_added += result.added

        duration = time.time() - start_time
        status = "partial" if has_errors else "success"
        logger.info(
            "pipeline_complete",
            extra={
                "run_id": run_id,
                "status": status,
                "sources_total": sources_total,
                "sources_done": sources_done,
                "reels_added": reels_added,
                "duration_seconds": round(duration, 2),
            },
        )
        return {
            "run_id": run_id,
            "status": status,
            "dry_run": dry_run,
            "sources_total": sources_total,
            "sources_done": sources_done,
            "reels_added": reels_added,
            "duration_seconds": round(duration, 2),
        }

    except Exception as exc:
        duration = time.time() - start_time
        logger.exception(
            "pipeline_error",
            extra={"run_id": run_id, "phase": "setup", "error": str(exc)},
        )
        return {
            "run_id": run_id,
            "status": "failed",
            "error": str(exc),
            "duration_seconds": round(duration, 2),
        }

    finally:
        release_pipeline_lock()

"""One parsing run: scrape a single source and persist its reels.

Every run is recorded in ``parsing_run_logs``: a ``running`` row when it
starts, closed as ``completed`` / ``partial_success`` / ``failed``.
A failure after the run starts (scraping or saving) closes the log as
``failed`` and is re-raised; there is no retry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import uuid4

from scraper_bot.db.base import StorageAdapter
from scraper_bot.models.enums import RunStatus, SourceType
from scraper_bot.models.parsing_run import ParsingRunLogCreate
from scraper_bot.services.scraping import ApifyReelsScraper, ScrapeOptions, map_apify_reel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParsingResult:
    run_id: str
    found: int
    added: int
    status: RunStatus


async def parse_source(
    storage: StorageAdapter,
    scraper: ApifyReelsScraper,
    project_id: int,
    source_type: SourceType,
    source_id: int,
    target: str,
    options: ScrapeOptions | None = None,
    run_id: str | None = None,
) -> ParsingResult:
    """Scrape *target* and save its reels under the given project/source.

    ``target`` is the account username or ``#hashtag`` passed to the
    scraper.  The caller owns the storage connection.
    """
    run_log = ParsingRunLogCreate(
        run_id=run_id or str(uuid4()),
        project_id=project_id,
        source_type=source_type,
        source_id=source_id,
    )
    await storage.log_parsing_run(run_log)

    logger.info(
        "parsing_run_start",
        extra={
            "run_id": run_log.run_id,
            "project_id": project_id,
            "source_type": source_type.value,
            "source_id": source_id,
            "target": target,
        },
    )

    try:
        items = await scraper.scrape(target, options)
        drafts = [map_apify_reel(item) for item in items]
        added = await storage.save_reels(drafts, project_id, source_type, source_id)
        status = RunStatus.completed if added == len(drafts) else RunStatus.partial_success
        await storage.log_parsing_run(
            run_log.model_copy(
                update={
                    "status": status,
                    "ended_at": datetime.now(timezone.utc),
                    "reels_found_count": len(drafts),
                    "reels_added_count": added,
                }
            )
        )
    except Exception as exc:
        logger.error(
            "parsing_run_failed",
            extra={"run_id": run_log.run_id, "target": target, "error": str(exc)},
        )
        await _close_failed(storage, run_log, exc)
        raise

    logger.info(
        "parsing_run_complete",
        extra={
            "run_id": run_log.run_id,
            "target": target,
            "status": status.value,
            "found": len(drafts),
            "added": added,
        },
    )
    return ParsingResult(run_id=run_log.run_id, found=len(drafts), added=added, status=status)


def hashtag_target(hashtag: str) -> str:
    return f"#{hashtag}"


async def _close_failed(
    storage: StorageAdapter, run_log: ParsingRunLogCreate, error: Exception
) -> None:
    """Mark the run failed; a storage error here must not mask *error*."""
    try:
        await storage.log_parsing_run(
            run_log.model_copy(
                update={
                    "status": RunStatus.failed,
                    "ended_at": datetime.now(timezone.utc),
                    "error_message": str(error),
                }
            )
        )
    except Exception:
        logger.exception("parsing_run_close_failed", extra={"run_id": run_log.run_id})

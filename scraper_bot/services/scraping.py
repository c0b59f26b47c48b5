"""Apify-based Instagram Reels scraping client.

``ApifyReelsScraper.scrape`` runs the Instagram scraper actor for one
account handle or hashtag, keeps only reels that pass the age and views
filters and returns the raw dataset items.  ``map_apify_reel`` turns an
item into a ``ReelDraft`` for persistence.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from apify_client import ApifyClientAsync
from pydantic import BaseModel

from scraper_bot.core.config import Settings
from scraper_bot.core.constants import APIFY_OVERFETCH_FACTOR, REEL_URL_MARKER
from scraper_bot.core.exceptions import ScrapingConfigError, ScrapingError
from scraper_bot.models.reel import ReelDraft

logger = logging.getLogger(__name__)

INSTAGRAM_BASE_URL = "https://www.instagram.com"


class ScrapeOptions(BaseModel):
    """Result filters for one scraping call."""
    min_views: int | None = None
    max_age_days: int | None = None
    limit: int = 10

    @classmethod
    def from_settings(cls, settings: Settings) -> "ScrapeOptions":
        return cls(
            min_views=settings.SCRAPING_MIN_VIEWS,
            max_age_days=settings.SCRAPING_MAX_AGE_DAYS,
            limit=settings.SCRAPING_LIMIT,
        )


# ---------------------------------------------------------------------------
# Apify item helpers
# ---------------------------------------------------------------------------

def _parse_timestamp(raw: Any) -> datetime | None:
    """Apify returns ISO strings; older actor versions return unix seconds."""
    if not raw:
        return None
    if isinstance(raw, str):
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            return None
    if isinstance(raw, (int, float)):
        return datetime.fromtimestamp(raw, tz=timezone.utc)
    return None


def _view_count(item: dict[str, Any]) -> int | None:
    for key in ("videoViewCount", "videoPlayCount", "viewCount", "playsCount"):
        value = item.get(key)
        if value is not None:
            return int(value)
    return None


def _int_or_none(value: Any) -> int | None:
    return int(value) if value is not None else None


def map_apify_reel(item: dict[str, Any]) -> ReelDraft:
    """Map a single Apify Instagram scraper item to a ``ReelDraft``."""
    instagram_id = item.get("id")
    return ReelDraft(
        instagram_id=str(instagram_id) if instagram_id is not None else None,
        shortcode=item.get("shortCode"),
        url=item.get("url") or item.get("postUrl"),
        caption=item.get("caption"),
        author_username=item.get("ownerUsername"),
        author_id=str(item["ownerId"]) if item.get("ownerId") is not None else None,
        views=_view_count(item),
        likes=_int_or_none(item.get("likesCount")),
        comments_count=_int_or_none(item.get("commentsCount")),
        duration=item.get("videoDuration"),
        thumbnail_url=item.get("displayUrl") or item.get("previewUrl"),
        music_title=(item.get("musicInfo") or {}).get("song_name") or item.get("audioTitle"),
        music_artist=(item.get("musicInfo") or {}).get("artist_name") or item.get("audioAuthor"),
        published_at=_parse_timestamp(item.get("timestamp")),
        raw_data=item,
    )


def is_reel(item: dict[str, Any]) -> bool:
    """True for video items whose URL points at a reel."""
    url = item.get("url") or ""
    return item.get("type") == "Video" and REEL_URL_MARKER in url


def filter_reels(items: list[dict[str, Any]], options: ScrapeOptions) -> list[dict[str, Any]]:
    """Keep reels that pass the age and views filters, truncated to ``limit``.

    Items without a timestamp or a view count are not rejected by the
    corresponding filter.
    """
    cutoff: datetime | None = None
    if options.max_age_days is not None:
        cutoff = datetime.now(timezone.utc) - timedelta(days=options.max_age_days)

    kept: list[dict[str, Any]] = []
    for item in items:
        if not is_reel(item):
            continue
        published_at = _parse_timestamp(item.get("timestamp"))
        if cutoff is not None and published_at is not None and published_at < cutoff:
            continue
        views = _view_count(item)
        if options.min_views and views is not None and views < options.min_views:
            continue
        kept.append(item)
    return kept[: options.limit]


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class ApifyReelsScraper:
    """Scrapes reels of an account (``"username"``) or hashtag (``"#tag"``)."""

    def __init__(self, token: str, actor_id: str = "apify/instagram-scraper") -> None:
        if not token:
            raise ScrapingConfigError("APIFY_TOKEN is not configured")
        self.actor_id = actor_id
        self._client = ApifyClientAsync(token)

    def _build_run_input(self, target: str, options: ScrapeOptions) -> dict[str, Any]:
        results_limit = options.limit * APIFY_OVERFETCH_FACTOR
        if target.startswith("#"):
            tag = target.lstrip("#").strip()
            url = f"{INSTAGRAM_BASE_URL}/explore/tags/{tag}/"
        else:
            username = target.strip().lstrip("@")
            url = f"{INSTAGRAM_BASE_URL}/{username}/"
        run_input: dict[str, Any] = {
            "directUrls": [url],
            "resultsType": "posts",
            "resultsLimit": results_limit,
            "addParentData": False,
        }
        if options.max_age_days is not None:
            run_input["onlyPostsNewerThan"] = f"{options.max_age_days} days"
        return run_input

    async def scrape(self, target: str, options: ScrapeOptions | None = None) -> list[dict[str, Any]]:
        """Run the actor for *target* and return the filtered raw items.

        Raises ``ScrapingError`` on any Apify failure; no retry.
        """
        options = options or ScrapeOptions()
        run_input = self._build_run_input(target, options)

        logger.info(
            "apify_scrape_start",
            extra={"target": target, "actor_id": self.actor_id, "limit": options.limit},
        )
        try:
            run = await self._client.actor(self.actor_id).call(run_input=run_input)
            if run is None:
                raise ScrapingError(f"Apify actor {self.actor_id} returned no run for {target}")
            dataset = await self._client.dataset(run["defaultDatasetId"]).list_items()
            items: list[dict[str, Any]] = list(dataset.items)
        except ScrapingError:
            raise
        except Exception as exc:
            logger.error(
                "apify_scrape_failed",
                extra={"target": target, "actor_id": self.actor_id, "error": str(exc)},
            )
            raise ScrapingError(f"Apify scraping failed for {target}: {exc}") from exc

        reels = filter_reels(items, options)
        logger.info(
            "apify_scrape_complete",
            extra={"target": target, "items": len(items), "reels": len(reels)},
        )
        return reels


def create_scraper(settings: Settings) -> ApifyReelsScraper | None:
    """Build the scraper, or ``None`` when no Apify token is configured."""
    if not settings.APIFY_TOKEN:
        logger.warning("apify_token_missing")
        return None
    return ApifyReelsScraper(settings.APIFY_TOKEN, settings.APIFY_REELS_ACTOR_ID)

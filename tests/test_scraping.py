"""Unit tests for the Apify scraping client and the item mapper."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from scraper_bot.core.config import Settings
from scraper_bot.core.exceptions import ScrapingConfigError, ScrapingError
from scraper_bot.services.scraping import (
    ApifyReelsScraper,
    ScrapeOptions,
    create_scraper,
    filter_reels,
    is_reel,
    map_apify_reel,
)


def _apify_item(**overrides: Any) -> dict[str, Any]:
    """Return a realistic Apify Instagram scraper reel item."""
    item: dict[str, Any] = {
        "id": "3301234567890123456",
        "type": "Video",
        "shortCode": "C9abcDEF",
        "url": "https://www.instagram.com/reel/C9abcDEF/",
        "caption": "Before and after #beauty",
        "ownerUsername": "rival",
        "ownerId": "1234567",
        "videoViewCount": 120000,
        "likesCount": 3400,
        "commentsCount": 56,
        "videoDuration": 14.6,
        "displayUrl": "https://cdn.example.com/thumb.jpg",
        "musicInfo": {"song_name": "Song", "artist_name": "Artist"},
        "timestamp": (datetime.now(timezone.utc) - timedelta(days=2)).isoformat(),
    }
    item.update(overrides)
    return item


def _mock_apify(items: list[dict[str, Any]]) -> MagicMock:
    client = MagicMock()
    actor = MagicMock()
    actor.call = AsyncMock(return_value={"defaultDatasetId": "ds-1"})
    client.actor.return_value = actor
    dataset = MagicMock()
    dataset.list_items = AsyncMock(return_value=MagicMock(items=items))
    client.dataset.return_value = dataset
    return client


class TestMapApifyReel:
    """Field mapping from an Apify item to a ReelDraft."""

    def test_full_item(self) -> None:
        """Given a complete item, every field is mapped."""
        draft = map_apify_reel(_apify_item())

        assert draft.instagram_id == "3301234567890123456"
        assert draft.shortcode == "C9abcDEF"
        assert draft.url == "https://www.instagram.com/reel/C9abcDEF/"
        assert draft.author_username == "rival"
        assert draft.author_id == "1234567"
        assert draft.views == 120000
        assert draft.likes == 3400
        assert draft.comments_count == 56
        assert draft.music_title == "Song"
        assert draft.music_artist == "Artist"
        assert draft.published_at is not None and draft.published_at.tzinfo is not None
        assert draft.raw_data is not None

    def test_minimal_item(self) -> None:
        """Given a sparse item, missing fields stay None."""
        draft = map_apify_reel({"url": "https://www.instagram.com/reel/X/"})

        assert draft.instagram_id is None
        assert draft.views is None
        assert draft.published_at is None

    def test_unix_timestamp_and_play_count(self) -> None:
        draft = map_apify_reel(_apify_item(timestamp=1700000000, videoViewCount=None, videoPlayCount=42))

        assert draft.published_at == datetime.fromtimestamp(1700000000, tz=timezone.utc)
        assert draft.views == 42


class TestFilterReels:
    """Only recent, popular reels are kept."""

    def test_non_reels_dropped(self) -> None:
        assert is_reel(_apify_item()) is True
        assert is_reel(_apify_item(type="Image")) is False
        assert is_reel(_apify_item(url="https://www.instagram.com/p/XYZ/")) is False

    def test_age_views_and_limit(self) -> None:
        old = (datetime.now(timezone.utc) - timedelta(days=30)).isoformat()
        items = [
            _apify_item(url="https://www.instagram.com/reel/A/"),
            _apify_item(url="https://www.instagram.com/reel/B/", timestamp=old),
            _apify_item(url="https://www.instagram.com/reel/C/", videoViewCount=10),
            _apify_item(url="https://www.instagram.com/reel/D/"),
            _apify_item(url="https://www.instagram.com/reel/E/"),
        ]

        kept = filter_reels(items, ScrapeOptions(min_views=1000, max_age_days=14, limit=2))

        assert [i["url"].rsplit("/", 2)[-2] for i in kept] == ["A", "D"]


class TestApifyReelsScraper:
    """Actor invocation (mocked Apify client)."""

    def test_missing_token_fails_fast(self) -> None:
        with pytest.raises(ScrapingConfigError):
            ApifyReelsScraper("")

    def test_create_scraper_without_token(self) -> None:
        assert create_scraper(Settings(_env_file=None, APIFY_TOKEN="")) is None

    @pytest.mark.asyncio
    @patch("scraper_bot.services.scraping.ApifyClientAsync")
    async def test_account_target(self, mock_client_cls: MagicMock) -> None:
        client = _mock_apify([_apify_item()])
        mock_client_cls.return_value = client
        scraper = ApifyReelsScraper("token", "apify/instagram-scraper")

        reels = await scraper.scrape("rival", ScrapeOptions(min_views=1000, max_age_days=14, limit=10))

        assert len(reels) == 1
        run_input = client.actor.return_value.call.await_args.kwargs["run_input"]
        assert run_input["directUrls"] == ["https://www.instagram.com/rival/"]
        assert run_input["resultsLimit"] == 30
        assert run_input["onlyPostsNewerThan"] == "14 days"
        client.dataset.assert_called_once_with("ds-1")

    @pytest.mark.asyncio
    @patch("scraper_bot.services.scraping.ApifyClientAsync")
    async def test_hashtag_target(self, mock_client_cls: MagicMock) -> None:
        client = _mock_apify([])
        mock_client_cls.return_value = client

        await ApifyReelsScraper("token").scrape("#beauty")

        run_input = client.actor.return_value.call.await_args.kwargs["run_input"]
        assert run_input["directUrls"] == ["https://www.instagram.com/explore/tags/beauty/"]

    @pytest.mark.asyncio
    @patch("scraper_bot.services.scraping.ApifyClientAsync")
    async def test_actor_failure_wrapped(self, mock_client_cls: MagicMock) -> None:
        """Given an Apify error, ScrapingError is raised with the cause chained."""
        client = _mock_apify([])
        client.actor.return_value.call.side_effect = RuntimeError("Apify actor timeout")
        mock_client_cls.return_value = client

        with pytest.raises(ScrapingError, match="Apify scraping failed") as exc_info:
            await ApifyReelsScraper("token").scrape("rival")
        assert isinstance(exc_info.value.__cause__, RuntimeError)

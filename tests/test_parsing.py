"""Unit tests for single-source parsing runs."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from scraper_bot.core.exceptions import ScrapingError, StorageError
from scraper_bot.models.enums import RunStatus, SourceType
from scraper_bot.services.parsing import hashtag_target, parse_source


def _scraper(items=None, error: Exception | None = None) -> MagicMock:
    scraper = MagicMock()
    scraper.scrape = AsyncMock(return_value=items or [], side_effect=error)
    return scraper


def _logged_statuses(storage: MagicMock) -> list[RunStatus]:
    return [c.args[0].status for c in storage.log_parsing_run.await_args_list]


class TestParseSource:
    """Run logging around one scrape."""

    @pytest.mark.asyncio
    async def test_completed_run(self, storage: MagicMock) -> None:
        items = [{"id": "1", "url": "https://www.instagram.com/reel/A/"}, {"id": "2", "url": "https://www.instagram.com/reel/B/"}]
        storage.save_reels.return_value = 2

        result = await parse_source(storage, _scraper(items), 1, SourceType.competitor, 4, "rival")

        assert result.found == 2
        assert result.added == 2
        assert result.status == RunStatus.completed
        assert _logged_statuses(storage) == [RunStatus.running, RunStatus.completed]
        drafts, project_id, source_type, source_id = storage.save_reels.await_args.args
        assert [d.instagram_id for d in drafts] == ["1", "2"]
        assert (project_id, source_type, source_id) == (1, SourceType.competitor, 4)

    @pytest.mark.asyncio
    async def test_partial_success(self, storage: MagicMock) -> None:
        storage.save_reels.return_value = 1

        result = await parse_source(
            storage, _scraper([{"id": "1"}, {"id": "2"}]), 1, SourceType.hashtag, 2, "#spa"
        )

        assert result.status == RunStatus.partial_success
        closing = storage.log_parsing_run.await_args_list[-1].args[0]
        assert closing.reels_found_count == 2
        assert closing.reels_added_count == 1
        assert closing.ended_at is not None

    @pytest.mark.asyncio
    async def test_failure_logged_and_reraised(self, storage: MagicMock) -> None:
        """Given a scraping failure, the run is logged as failed and the error propagates."""
        with pytest.raises(ScrapingError):
            await parse_source(
                storage, _scraper(error=ScrapingError("quota")), 1, SourceType.competitor, 4, "rival"
            )

        assert _logged_statuses(storage) == [RunStatus.running, RunStatus.failed]
        failed = storage.log_parsing_run.await_args_list[-1].args[0]
        assert failed.error_message == "quota"
        storage.save_reels.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_save_failure_closes_run(self, storage: MagicMock) -> None:
        """Given saving fails, the run is logged as failed and the error propagates."""
        storage.save_reels.side_effect = StorageError("disk full")

        with pytest.raises(StorageError, match="disk full"):
            await parse_source(
                storage, _scraper([{"id": "1"}]), 1, SourceType.competitor, 4, "rival"
            )

        assert _logged_statuses(storage) == [RunStatus.running, RunStatus.failed]
        assert storage.log_parsing_run.await_args_list[-1].args[0].error_message == "disk full"

    @pytest.mark.asyncio
    async def test_failed_close_does_not_mask_error(self, storage: MagicMock) -> None:
        """Given the failed-status write also fails, the original error is raised."""
        storage.log_parsing_run.side_effect = [MagicMock(), StorageError("locked")]

        with pytest.raises(ScrapingError, match="quota"):
            await parse_source(
                storage, _scraper(error=ScrapingError("quota")), 1, SourceType.competitor, 4, "rival"
            )

    @pytest.mark.asyncio
    async def test_run_id_shared(self, storage: MagicMock) -> None:
        storage.save_reels.return_value = 0

        result = await parse_source(
            storage, _scraper(), 1, SourceType.competitor, 4, "rival", run_id="run-1"
        )

        assert result.run_id == "run-1"
        assert {c.args[0].run_id for c in storage.log_parsing_run.await_args_list} == {"run-1"}

    def test_hashtag_target(self) -> None:
        assert hashtag_target("beauty") == "#beauty"

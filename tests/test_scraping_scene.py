"""Tests for the scraping scene."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from scraper_bot.core import messages
from scraper_bot.core.exceptions import ScrapingError
from scraper_bot.models.enums import RunStatus, SceneName, SceneStep, SourceType
from scraper_bot.models.session import SceneSession
from scraper_bot.models.user import ChatUser
from scraper_bot.scenes import actions
from scraper_bot.scenes.base import Transition
from scraper_bot.scenes.scraping import ScrapingScene
from scraper_bot.services.parsing import ParsingResult
from scraper_bot.services.scraping import ScrapeOptions
from tests.factories import make_competitor, make_hashtag, make_project

SESSION = SceneSession(scene=SceneName.scraping, project_id=1)


def _callback_data(markup) -> list[str]:
    return [button.callback_data for row in markup.inline_keyboard for button in row]


def _result(added: int) -> ParsingResult:
    return ParsingResult(run_id="r", found=added, added=added, status=RunStatus.completed)


@pytest.fixture()
def scene(storage: MagicMock) -> ScrapingScene:
    return ScrapingScene(storage, MagicMock(), ScrapeOptions(min_views=10, max_age_days=7, limit=5))


class TestMenu:
    """Project scraping menu."""

    @pytest.mark.asyncio
    async def test_no_sources(self, scene: ScrapingScene, storage: MagicMock, chat_user: ChatUser) -> None:
        storage.get_project_by_id.return_value = make_project(1)

        result = await scene.on_action(SESSION, actions.ScrapeProject(project_id=1), chat_user)

        reply = result.replies[0]
        assert messages.SCRAPING_NO_SOURCES in reply.text
        assert reply.parse_mode == "HTML"
        assert _callback_data(reply.keyboard) == ["competitors_project_1", "manage_hashtags_1", "project_1"]

    @pytest.mark.asyncio
    async def test_preview_truncated_and_escaped(
        self, scene: ScrapingScene, storage: MagicMock, chat_user: ChatUser
    ) -> None:
        storage.get_project_by_id.return_value = make_project(1, "<b>Clinic</b>")
        storage.get_competitor_accounts.return_value = [
            make_competitor(i, f"user{i}") for i in range(1, 8)
        ]
        storage.get_hashtags_by_project_id.return_value = [make_hashtag(1, "beauty")]

        result = await scene.on_action(SESSION, actions.ScrapeProject(project_id=1), chat_user)

        text = result.replies[0].text
        assert "&lt;b&gt;Clinic&lt;/b&gt;" in text
        assert "@user5" in text and "@user6" not in text
        assert messages.SCRAPING_MORE.format(count=2) in text
        assert "#beauty" in text
        assert result.session.step == SceneStep.scraping_menu
        assert _callback_data(result.replies[0].keyboard) == [
            "scrape_competitors_1",
            "scrape_hashtags_1",
            "scrape_all_1",
            "project_1",
            "exit_scene",
        ]

    @pytest.mark.asyncio
    async def test_competitor_picker(self, scene: ScrapingScene, storage: MagicMock, chat_user: ChatUser) -> None:
        storage.get_competitor_accounts.return_value = [make_competitor(4, "rival")]

        result = await scene.on_action(SESSION, actions.ScrapeCompetitors(project_id=1), chat_user)

        assert result.session.step == SceneStep.scraping_competitors
        assert _callback_data(result.replies[0].keyboard) == [
            "scrape_competitor_1_4",
            "scrape_all_competitors_1",
            "back_to_scraping_menu",
        ]

    @pytest.mark.asyncio
    async def test_empty_hashtag_picker(self, scene: ScrapingScene, storage: MagicMock, chat_user: ChatUser) -> None:
        result = await scene.on_action(SESSION, actions.ScrapeHashtags(project_id=1), chat_user)

        assert result.replies[0].text == messages.SCRAPING_NO_HASHTAGS

    @pytest.mark.asyncio
    async def test_back_to_menu_reenters(self, scene: ScrapingScene, chat_user: ChatUser) -> None:
        result = await scene.on_action(SESSION, actions.BackToScrapingMenu(), chat_user)

        assert result.transition == Transition.reenter
        assert result.session.project_id == 1


class TestRuns:
    """Sequential scraping runs."""

    @pytest.mark.asyncio
    @patch("scraper_bot.scenes.scraping.parse_source", new_callable=AsyncMock)
    async def test_scrape_all_runs_every_source(
        self,
        mock_parse: AsyncMock,
        scene: ScrapingScene,
        storage: MagicMock,
        chat_user: ChatUser,
    ) -> None:
        storage.get_competitor_accounts.return_value = [make_competitor(4, "rival")]
        storage.get_hashtags_by_project_id.return_value = [make_hashtag(6, "beauty")]
        mock_parse.side_effect = [_result(2), _result(3)]

        result = await scene.on_action(SESSION, actions.ScrapeAll(project_id=1), chat_user)

        calls = [c.args[3:6] for c in mock_parse.await_args_list]
        assert calls == [
            (SourceType.competitor, 4, "rival"),
            (SourceType.hashtag, 6, "#beauty"),
        ]
        text = result.replies[0].text
        assert messages.SCRAPING_SUMMARY.format(done=2, total=2, added=5) in text
        storage.initialize.assert_awaited_once()
        storage.close.assert_awaited_once()

    @pytest.mark.asyncio
    @patch("scraper_bot.scenes.scraping.parse_source", new_callable=AsyncMock)
    async def test_stops_at_first_failure(
        self,
        mock_parse: AsyncMock,
        scene: ScrapingScene,
        storage: MagicMock,
        chat_user: ChatUser,
    ) -> None:
        """Given a failing first source, the remaining sources are not scraped."""
        storage.get_competitor_accounts.return_value = [
            make_competitor(4, "rival"),
            make_competitor(5, "other"),
        ]
        mock_parse.side_effect = ScrapingError("rate limited")

        result = await scene.on_action(
            SESSION, actions.ScrapeAllCompetitors(project_id=1), chat_user
        )

        assert mock_parse.await_count == 1
        text = result.replies[0].text
        assert messages.SCRAPING_SOURCE_FAILED.format(source="@rival") in text
        assert messages.SCRAPING_SUMMARY.format(done=0, total=2, added=0) in text
        assert "rate limited" not in text

    @pytest.mark.asyncio
    @patch("scraper_bot.scenes.scraping.parse_source", new_callable=AsyncMock)
    async def test_single_hashtag(
        self,
        mock_parse: AsyncMock,
        scene: ScrapingScene,
        storage: MagicMock,
        chat_user: ChatUser,
    ) -> None:
        storage.get_hashtags_by_project_id.return_value = [make_hashtag(6, "beauty"), make_hashtag(7, "spa")]
        mock_parse.return_value = _result(1)

        await scene.on_action(SESSION, actions.ScrapeHashtag(project_id=1, hashtag_id=7), chat_user)

        mock_parse.assert_awaited_once()
        assert mock_parse.await_args.args[3:6] == (SourceType.hashtag, 7, "#spa")

    @pytest.mark.asyncio
    async def test_missing_source(self, scene: ScrapingScene, storage: MagicMock, chat_user: ChatUser) -> None:
        result = await scene.on_action(
            SESSION, actions.ScrapeCompetitor(project_id=1, competitor_id=99), chat_user
        )

        assert result.replies[0].text == messages.SCRAPING_SOURCE_NOT_FOUND
        storage.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_scraper_not_configured(self, storage: MagicMock, chat_user: ChatUser) -> None:
        scene = ScrapingScene(storage, None)

        result = await scene.on_action(SESSION, actions.ScrapeAll(project_id=1), chat_user)

        assert result.replies[0].text == messages.SCRAPING_UNAVAILABLE
        storage.initialize.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_storage_failure(self, scene: ScrapingScene, storage: MagicMock, chat_user: ChatUser) -> None:
        storage.get_competitor_accounts.side_effect = RuntimeError("boom")

        result = await scene.on_action(
            SESSION, actions.ScrapeAllCompetitors(project_id=1), chat_user
        )

        assert result.replies[0].text == messages.SCRAPING_ERROR
        assert result.session.step is None
        storage.close.assert_awaited_once()

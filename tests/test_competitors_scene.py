"""Tests for the competitors scene and the shared project-scoped entry."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from scraper_bot.core import messages
from scraper_bot.models.enums import SceneName, SceneStep
from scraper_bot.models.session import SceneSession
from scraper_bot.models.user import ChatUser
from scraper_bot.scenes import actions
from scraper_bot.scenes.base import Transition
from scraper_bot.scenes.competitors import CompetitorsScene
from tests.factories import make_competitor, make_project, make_user

SESSION = SceneSession(scene=SceneName.competitors)


def _callback_data(markup) -> list[str]:
    return [button.callback_data for row in markup.inline_keyboard for button in row]


class TestEntryCardinality:
    """Entry branches on how many projects the user has."""

    @pytest.mark.asyncio
    async def test_unregistered_user_leaves(self, storage: MagicMock, chat_user: ChatUser) -> None:
        storage.get_user_by_telegram_id.return_value = None

        result = await CompetitorsScene(storage).enter(SESSION, chat_user)

        assert result.transition == Transition.leave
        assert result.replies[0].text == messages.NOT_REGISTERED
        storage.create_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_zero_projects(self, storage: MagicMock, chat_user: ChatUser) -> None:
        storage.get_user_by_telegram_id.return_value = make_user()

        result = await CompetitorsScene(storage).enter(SESSION, chat_user)

        assert result.transition == Transition.leave
        assert result.replies[0].text == messages.NO_PROJECTS_HINT

    @pytest.mark.asyncio
    async def test_one_project_skips_selection(self, storage: MagicMock, chat_user: ChatUser) -> None:
        storage.get_user_by_telegram_id.return_value = make_user()
        storage.get_projects_by_user_id.return_value = [make_project(4, "Solo")]
        storage.get_competitor_accounts.return_value = [make_competitor(1, "rival", 4)]

        result = await CompetitorsScene(storage).enter(SESSION, chat_user)

        assert result.session.project_id == 4
        assert result.session.step == SceneStep.competitor_list
        assert "@rival - https://www.instagram.com/rival/" in result.replies[0].text
        data = _callback_data(result.replies[0].keyboard)
        assert "delete_competitor_4_rival" in data
        assert "add_competitor_4" in data
        assert "back_to_projects" not in data
        storage.get_competitor_accounts.assert_awaited_once_with(4)

    @pytest.mark.asyncio
    async def test_two_projects_offer_selection(self, storage: MagicMock, chat_user: ChatUser) -> None:
        storage.get_user_by_telegram_id.return_value = make_user()
        storage.get_projects_by_user_id.return_value = [make_project(1), make_project(2, "B")]

        result = await CompetitorsScene(storage).enter(SESSION, chat_user)

        assert result.session.step == SceneStep.project_selection
        assert result.replies[0].text == messages.COMPETITORS_SELECT_PROJECT
        assert _callback_data(result.replies[0].keyboard) == [
            "competitors_project_1",
            "competitors_project_2",
            "exit_scene",
        ]
        storage.get_competitor_accounts.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_session_project_kept_on_reentry(
        self, storage: MagicMock, chat_user: ChatUser
    ) -> None:
        """Given a focused project among several, re-entry shows it directly."""
        storage.get_user_by_telegram_id.return_value = make_user()
        storage.get_projects_by_user_id.return_value = [make_project(1), make_project(2, "B")]

        result = await CompetitorsScene(storage).enter(SESSION.focus(2), chat_user)

        assert result.session.project_id == 2
        assert result.session.step == SceneStep.competitor_list
        assert "back_to_projects" in _callback_data(result.replies[0].keyboard)

    @pytest.mark.asyncio
    async def test_listing_failure_leaves(self, storage: MagicMock, chat_user: ChatUser) -> None:
        storage.get_user_by_telegram_id.return_value = make_user()
        storage.get_projects_by_user_id.side_effect = RuntimeError("boom")

        result = await CompetitorsScene(storage).enter(SESSION, chat_user)

        assert result.transition == Transition.leave
        assert result.replies[0].text == messages.COMPETITORS_LOAD_ERROR
        storage.close.assert_awaited_once()


class TestCompetitorActions:
    """Add and delete flows."""

    @pytest.mark.asyncio
    async def test_add_competitor_prompts(self, storage: MagicMock, chat_user: ChatUser) -> None:
        result = await CompetitorsScene(storage).on_action(
            SESSION, actions.AddCompetitor(project_id=3), chat_user
        )

        assert result.session.step == SceneStep.add_competitor
        assert result.session.project_id == 3
        assert result.replies[0].text == messages.COMPETITOR_URL_PROMPT

    @pytest.mark.asyncio
    async def test_open_project_from_list(self, storage: MagicMock, chat_user: ChatUser) -> None:
        storage.get_project_by_id.return_value = make_project(3)

        result = await CompetitorsScene(storage).on_action(
            SESSION, actions.CompetitorsProject(project_id=3), chat_user
        )

        assert result.session.step == SceneStep.competitor_list
        assert result.replies[0].text == messages.COMPETITORS_EMPTY.format(name="My Clinic")
        storage.initialize.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_reenters(self, storage: MagicMock, chat_user: ChatUser) -> None:
        storage.delete_competitor_account.return_value = True

        result = await CompetitorsScene(storage).on_action(
            SESSION, actions.DeleteCompetitor(project_id=3, username="rival"), chat_user
        )

        storage.delete_competitor_account.assert_awaited_once_with(3, "rival")
        assert result.transition == Transition.reenter
        assert result.callback_answer == messages.ANSWER_DELETED

    @pytest.mark.asyncio
    async def test_delete_not_found(self, storage: MagicMock, chat_user: ChatUser) -> None:
        storage.delete_competitor_account.return_value = False

        result = await CompetitorsScene(storage).on_action(
            SESSION, actions.DeleteCompetitor(project_id=3, username="rival"), chat_user
        )

        assert result.transition == Transition.stay
        assert result.callback_answer == messages.ANSWER_DELETE_FAILED

    @pytest.mark.asyncio
    async def test_delete_error(self, storage: MagicMock, chat_user: ChatUser) -> None:
        storage.delete_competitor_account.side_effect = RuntimeError("boom")

        result = await CompetitorsScene(storage).on_action(
            SESSION, actions.DeleteCompetitor(project_id=3, username="rival"), chat_user
        )

        assert result.replies[0].text == messages.COMPETITOR_DELETE_ERROR
        assert result.callback_answer == messages.ANSWER_ERROR
        storage.close.assert_awaited_once()


class TestUrlInput:
    """Text input while awaiting a competitor URL."""

    @pytest.mark.asyncio
    async def test_invalid_url_reprompts(self, storage: MagicMock, chat_user: ChatUser) -> None:
        session = SESSION.focus(3, SceneStep.add_competitor)

        result = await CompetitorsScene(storage).on_text(session, "https://example.com/foo", chat_user)

        assert result.session == session
        assert result.replies[0].text == messages.COMPETITOR_URL_INVALID
        storage.add_competitor_account.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_valid_url_adds(self, storage: MagicMock, chat_user: ChatUser) -> None:
        storage.add_competitor_account.return_value = make_competitor(8, "foo", 3)
        session = SESSION.focus(3, SceneStep.add_competitor)

        result = await CompetitorsScene(storage).on_text(
            session, " https://www.instagram.com/foo/ ", chat_user
        )

        storage.add_competitor_account.assert_awaited_once_with(
            3, "foo", "https://www.instagram.com/foo/"
        )
        assert result.session.step is None
        assert result.replies[0].text == messages.COMPETITOR_ADDED.format(username="foo")

    @pytest.mark.asyncio
    async def test_add_failure_resets_step(self, storage: MagicMock, chat_user: ChatUser) -> None:
        storage.add_competitor_account.side_effect = RuntimeError("boom")
        session = SESSION.focus(3, SceneStep.add_competitor)

        result = await CompetitorsScene(storage).on_text(
            session, "https://www.instagram.com/foo/", chat_user
        )

        assert result.session.step is None
        assert result.replies[0].text == messages.COMPETITOR_ADD_ERROR
        storage.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_project(self, storage: MagicMock, chat_user: ChatUser) -> None:
        session = SESSION.with_step(SceneStep.add_competitor)

        result = await CompetitorsScene(storage).on_text(
            session, "https://www.instagram.com/foo/", chat_user
        )

        assert result.replies[0].text == messages.COMPETITOR_PROJECT_MISSING
        assert result.session.step is None

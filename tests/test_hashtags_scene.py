"""Tests for the hashtags scene."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from scraper_bot.core import messages
from scraper_bot.models.enums import SceneName, SceneStep
from scraper_bot.models.session import SceneSession
from scraper_bot.models.user import ChatUser
from scraper_bot.scenes import actions
from scraper_bot.scenes.base import Transition
from scraper_bot.scenes.hashtags import HashtagsScene
from tests.factories import make_hashtag, make_project, make_user

SESSION = SceneSession(scene=SceneName.hashtags, project_id=2)


def _callback_data(markup) -> list[str]:
    return [button.callback_data for row in markup.inline_keyboard for button in row]


class TestShowHashtags:
    """Listing of a project's hashtags."""

    @pytest.mark.asyncio
    async def test_lists_hashtags(self, storage: MagicMock, chat_user: ChatUser) -> None:
        storage.get_user_by_telegram_id.return_value = make_user()
        storage.get_projects_by_user_id.return_value = [make_project(2)]
        storage.get_hashtags_by_project_id.return_value = [make_hashtag(1, "beauty", 2)]

        result = await HashtagsScene(storage).enter(SESSION, chat_user)

        assert result.session.step == SceneStep.hashtag_list
        assert "1. #beauty" in result.replies[0].text
        assert _callback_data(result.replies[0].keyboard) == [
            "delete_hashtag_2_beauty",
            "add_hashtag_2",
            "project_2",
            "exit_scene",
        ]

    @pytest.mark.asyncio
    async def test_manage_hashtags_opens_project(self, storage: MagicMock, chat_user: ChatUser) -> None:
        storage.get_project_by_id.return_value = make_project(2)

        result = await HashtagsScene(storage).on_action(
            SESSION, actions.ManageHashtags(project_id=2), chat_user
        )

        assert result.replies[0].text == messages.HASHTAGS_EMPTY.format(name="My Clinic")


class TestHashtagInput:
    """Text input while awaiting a hashtag."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["#Test", "Test"])
    async def test_hash_stripped_before_storage(
        self, storage: MagicMock, chat_user: ChatUser, text: str
    ) -> None:
        storage.add_hashtag.return_value = make_hashtag(3, "Test", 2)
        session = SESSION.with_step(SceneStep.add_hashtag)

        result = await HashtagsScene(storage).on_text(session, text, chat_user)

        storage.add_hashtag.assert_awaited_once_with(2, "Test")
        assert result.transition == Transition.reenter
        assert result.replies[0].text == messages.HASHTAG_ADDED.format(hashtag="Test")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["two words", "a", "#"])
    async def test_invalid_reprompts(self, storage: MagicMock, chat_user: ChatUser, text: str) -> None:
        session = SESSION.with_step(SceneStep.add_hashtag)

        result = await HashtagsScene(storage).on_text(session, text, chat_user)

        assert result.session == session
        assert result.replies[0].text == messages.HASHTAG_INVALID
        storage.initialize.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_storage_error(self, storage: MagicMock, chat_user: ChatUser) -> None:
        storage.add_hashtag.side_effect = RuntimeError("boom")
        session = SESSION.with_step(SceneStep.add_hashtag)

        result = await HashtagsScene(storage).on_text(session, "beauty", chat_user)

        assert result.session.step is None
        assert result.replies[0].text == messages.HASHTAG_ADD_ERROR
        storage.close.assert_awaited_once()


class TestHashtagActions:
    """Add, cancel and delete buttons."""

    @pytest.mark.asyncio
    async def test_add_prompts_with_cancel(self, storage: MagicMock, chat_user: ChatUser) -> None:
        result = await HashtagsScene(storage).on_action(
            SESSION, actions.AddHashtag(project_id=2), chat_user
        )

        assert result.session.step == SceneStep.add_hashtag
        assert _callback_data(result.replies[0].keyboard) == ["cancel_hashtag_input_2"]

    @pytest.mark.asyncio
    async def test_cancel_deletes_prompt_and_reenters(
        self, storage: MagicMock, chat_user: ChatUser
    ) -> None:
        session = SESSION.with_step(SceneStep.add_hashtag)

        result = await HashtagsScene(storage).on_action(
            session, actions.CancelHashtagInput(project_id=2), chat_user
        )

        assert result.transition == Transition.reenter
        assert result.delete_origin is True
        assert result.session.step is None
        assert result.callback_answer == messages.HASHTAG_INPUT_CANCELLED

    @pytest.mark.asyncio
    async def test_delete(self, storage: MagicMock, chat_user: ChatUser) -> None:
        storage.remove_hashtag.return_value = True

        result = await HashtagsScene(storage).on_action(
            SESSION, actions.DeleteHashtag(project_id=2, hashtag="beauty"), chat_user
        )

        storage.remove_hashtag.assert_awaited_once_with(2, "beauty")
        assert result.transition == Transition.reenter
        assert result.callback_answer == messages.ANSWER_DELETED

    @pytest.mark.asyncio
    async def test_delete_missing(self, storage: MagicMock, chat_user: ChatUser) -> None:
        storage.remove_hashtag.return_value = False

        result = await HashtagsScene(storage).on_action(
            SESSION, actions.DeleteHashtag(project_id=2, hashtag="beauty"), chat_user
        )

        assert result.transition == Transition.stay
        assert result.replies[0].text == messages.HASHTAG_DELETE_NOT_FOUND.format(hashtag="beauty")

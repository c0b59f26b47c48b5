"""Hashtags scene: tracked hashtags of a project (stored without ``#``)."""

from __future__ import annotations

import logging

from scraper_bot.core import messages
from scraper_bot.core.validation import normalize_hashtag
from scraper_bot.models.enums import SceneName, SceneStep
from scraper_bot.models.project import Project
from scraper_bot.models.session import SceneSession
from scraper_bot.models.user import ChatUser
from scraper_bot.scenes import actions, keyboards
from scraper_bot.scenes.base import ActionHandler, ProjectScopedScene, Reply, SceneResult

logger = logging.getLogger(__name__)


class HashtagsScene(ProjectScopedScene):
    name = SceneName.hashtags
    exit_text = messages.HASHTAGS_EXIT
    select_prompt = messages.HASHTAGS_SELECT_PROJECT
    select_action = actions.ManageHashtags
    load_error = messages.HASHTAGS_LOAD_ERROR

    async def show_project(
        self, session: SceneSession, project: Project, has_multiple: bool
    ) -> SceneResult:
        hashtags = await self.storage.get_hashtags_by_project_id(project.id)
        if hashtags:
            items = "\n".join(f"{i}. #{h.hashtag}" for i, h in enumerate(hashtags, start=1))
            text = messages.HASHTAGS_LIST.format(name=project.name, items=items)
        else:
            text = messages.HASHTAGS_EMPTY.format(name=project.name)
        return self.stay(
            session.with_step(SceneStep.hashtag_list),
            Reply(text=text, keyboard=keyboards.hashtags_keyboard(project.id, hashtags)),
        )

    def action_handlers(self) -> dict[str, ActionHandler]:
        return {
            **super().action_handlers(),
            "manage_hashtags": self.on_manage_hashtags,
            "add_hashtag": self.on_add_hashtag,
            "cancel_hashtag_input": self.on_cancel_input,
            "delete_hashtag": self.on_delete_hashtag,
        }

    async def on_manage_hashtags(
        self, session: SceneSession, action: actions.ManageHashtags, user: ChatUser
    ) -> SceneResult:
        return await self.open_project(session, action.project_id, user)

    async def on_add_hashtag(
        self, session: SceneSession, action: actions.AddHashtag, user: ChatUser
    ) -> SceneResult:
        return self.stay(
            session.focus(action.project_id, SceneStep.add_hashtag),
            Reply(
                text=messages.HASHTAG_PROMPT,
                keyboard=keyboards.hashtag_input_keyboard(action.project_id),
            ),
        )

    async def on_cancel_input(
        self, session: SceneSession, action: actions.CancelHashtagInput, user: ChatUser
    ) -> SceneResult:
        result = self.reenter(
            session.focus(action.project_id), answer=messages.HASHTAG_INPUT_CANCELLED
        )
        return result.model_copy(update={"delete_origin": True})

    async def on_delete_hashtag(
        self, session: SceneSession, action: actions.DeleteHashtag, user: ChatUser
    ) -> SceneResult:
        try:
            async with self.storage.opened():
                removed = await self.storage.remove_hashtag(action.project_id, action.hashtag)
        except Exception:
            logger.exception(
                "hashtag_delete_failed",
                extra={"project_id": action.project_id, "hashtag": action.hashtag},
            )
            return self.failure(session, messages.HASHTAG_DELETE_ERROR, answer=messages.ANSWER_ERROR)

        if not removed:
            return self.stay(
                session,
                Reply(text=messages.HASHTAG_DELETE_NOT_FOUND.format(hashtag=action.hashtag)),
                answer=messages.ANSWER_DELETE_FAILED,
            )
        logger.info(
            "hashtag_deleted",
            extra={"project_id": action.project_id, "hashtag": action.hashtag},
        )
        return self.reenter(
            session.focus(action.project_id),
            Reply(text=messages.HASHTAG_DELETED.format(hashtag=action.hashtag)),
            answer=messages.ANSWER_DELETED,
        )

    async def on_text(self, session: SceneSession, text: str, user: ChatUser) -> SceneResult:
        if session.step != SceneStep.add_hashtag:
            return self.stay(session)

        if session.project_id is None:
            return self.stay(session.with_step(None), Reply(text=messages.HASHTAG_PROJECT_MISSING))

        hashtag = normalize_hashtag(text)
        if hashtag is None:
            return self.stay(session, Reply(text=messages.HASHTAG_INVALID))

        project_id = session.project_id
        try:
            async with self.storage.opened():
                added = await self.storage.add_hashtag(project_id, hashtag)
        except Exception:
            logger.exception(
                "hashtag_add_failed",
                extra={"project_id": project_id, "hashtag": hashtag},
            )
            return self.failure(session, messages.HASHTAG_ADD_ERROR)

        if added is None:
            return self.stay(
                session.with_step(None),
                Reply(text=messages.HASHTAG_ADD_FAILED.format(hashtag=hashtag)),
            )

        logger.info("hashtag_added", extra={"project_id": project_id, "hashtag": hashtag})
        return self.reenter(session, Reply(text=messages.HASHTAG_ADDED.format(hashtag=hashtag)))

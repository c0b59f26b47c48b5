"""Scene state machine primitives.

A scene is a set of pure-ish transition functions: each takes the current
``SceneSession`` (plus the chat user and the action or text) and returns a
``SceneResult`` describing the next session, the replies to send and how
control moves on (stay, leave, re-enter, enter another scene).  Scenes
never talk to Telegram; ``bot.runner.SceneRunner`` applies the result and
``bot.handlers`` renders it.

Every public transition is an error boundary: storage failures are logged
with ``logger.exception`` and turned into a generic user-facing message.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from enum import Enum

from aiogram.types import InlineKeyboardMarkup
from pydantic import BaseModel

from scraper_bot.core import messages
from scraper_bot.db.base import StorageAdapter
from scraper_bot.models.enums import SceneName, SceneStep
from scraper_bot.models.project import Project
from scraper_bot.models.session import SceneSession
from scraper_bot.models.user import ChatUser
from scraper_bot.scenes import actions, keyboards

logger = logging.getLogger(__name__)


class Transition(str, Enum):
    stay = "stay"
    leave = "leave"
    reenter = "reenter"
    enter = "enter"


class Reply(BaseModel):
    """One outgoing message."""
    text: str
    keyboard: InlineKeyboardMarkup | None = None
    remove_keyboard: bool = False
    parse_mode: str | None = None


class SceneResult(BaseModel):
    """Outcome of one transition."""
    session: SceneSession
    replies: list[Reply] = []
    callback_answer: str | None = None
    transition: Transition = Transition.stay
    target: SceneName | None = None
    delete_origin: bool = False


# Per-prefix texts for callback payloads whose ids do not parse.
INVALID_PAYLOAD_MESSAGES: dict[str, str] = {
    "competitors_project": messages.INVALID_COMPETITOR_PAYLOAD,
    "add_competitor": messages.INVALID_COMPETITOR_PAYLOAD,
    "add_hashtag": messages.INVALID_HASHTAG_PROJECT_PAYLOAD,
    "cancel_hashtag_input": messages.INVALID_HASHTAG_PROJECT_PAYLOAD,
    "manage_hashtags": messages.INVALID_HASHTAG_PROJECT_PAYLOAD,
    "delete_hashtag": messages.INVALID_DELETE_HASHTAG_PAYLOAD,
}


def invalid_payload_result(session: SceneSession, action: actions.InvalidPayload) -> SceneResult:
    """User-visible error, callback answered, session unchanged."""
    logger.warning("invalid_callback_payload", extra={"payload": action.raw, "prefix": action.prefix})
    text = INVALID_PAYLOAD_MESSAGES.get(action.prefix, messages.INVALID_PAYLOAD)
    return SceneResult(
        session=session,
        replies=[Reply(text=text)],
        callback_answer=messages.ANSWER_ERROR,
    )


ActionHandler = Callable[[SceneSession, actions.Action, ChatUser], Awaitable[SceneResult]]


class Scene(ABC):
    """Base class of every scene."""

    name: SceneName
    exit_text: str = ""
    exit_answer: str | None = None

    def __init__(self, storage: StorageAdapter) -> None:
        self.storage = storage

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    @abstractmethod
    async def enter(self, session: SceneSession, user: ChatUser) -> SceneResult: ...

    def action_handlers(self) -> dict[str, ActionHandler]:
        """Map of action kind -> handler.  Scenes extend this."""
        return {"exit_scene": self.on_exit}

    def handles(self, action: actions.Action) -> bool:
        return getattr(action, "kind", None) in self.action_handlers()

    async def on_action(
        self, session: SceneSession, action: actions.Action, user: ChatUser
    ) -> SceneResult:
        handler = self.action_handlers().get(getattr(action, "kind", ""))
        if handler is None:
            return SceneResult(session=session, callback_answer=messages.ANSWER_UNAVAILABLE)
        return await handler(session, action, user)

    async def on_text(self, session: SceneSession, text: str, user: ChatUser) -> SceneResult:
        """Free text while idle is ignored."""
        return SceneResult(session=session)

    async def on_exit(
        self, session: SceneSession, action: actions.Action, user: ChatUser
    ) -> SceneResult:
        return self.leave(
            session,
            Reply(text=self.exit_text, remove_keyboard=True),
            answer=self.exit_answer,
        )

    # ------------------------------------------------------------------
    # Result helpers
    # ------------------------------------------------------------------

    def stay(self, session: SceneSession, *replies: Reply, answer: str | None = None) -> SceneResult:
        return SceneResult(session=session, replies=list(replies), callback_answer=answer)

    def leave(self, session: SceneSession, *replies: Reply, answer: str | None = None) -> SceneResult:
        return SceneResult(
            session=SceneSession(),
            replies=list(replies),
            callback_answer=answer,
            transition=Transition.leave,
        )

    def reenter(
        self, session: SceneSession, *replies: Reply, answer: str | None = None
    ) -> SceneResult:
        return SceneResult(
            session=session.with_step(None),
            replies=list(replies),
            callback_answer=answer,
            transition=Transition.reenter,
        )

    def failure(
        self, session: SceneSession, text: str, leave: bool = False, answer: str | None = None
    ) -> SceneResult:
        """Generic error reply: leave the scene or reset the step."""
        if leave:
            return self.leave(session, Reply(text=text), answer=answer)
        return self.stay(session.with_step(None), Reply(text=text), answer=answer)


class ProjectScopedScene(Scene):
    """Scene that works on one project of a registered user.

    Entry resolves the user (must already exist), loads the active
    projects and picks the one in focus: the session's project, the only
    project, or an explicit choice from a selection list.
    """

    select_prompt: str = ""
    select_action: type[actions.Action] = actions.SelectProject
    load_error: str = messages.PROJECT_LOAD_ERROR

    async def enter(self, session: SceneSession, user: ChatUser) -> SceneResult:
        try:
            async with self.storage.opened():
                db_user = await self.storage.get_user_by_telegram_id(user.telegram_id)
                if db_user is None:
                    return self.leave(session, Reply(text=messages.NOT_REGISTERED))

                projects = await self.storage.get_projects_by_user_id(db_user.id)
                if not projects:
                    return self.leave(session, Reply(text=messages.NO_PROJECTS_HINT))

                project = self._pick_project(session, projects)
                if project is None:
                    return self.stay(
                        session.focus(None, SceneStep.project_selection),
                        Reply(
                            text=self.select_prompt,
                            keyboard=keyboards.project_selection_keyboard(projects, self.select_action),
                        ),
                    )
                return await self.show_project(
                    session.focus(project.id), project, has_multiple=len(projects) > 1
                )
        except Exception:
            logger.exception(
                "scene_enter_failed",
                extra={"scene": self.name.value, "telegram_id": user.telegram_id},
            )
            return self.failure(session, self.load_error, leave=True)

    @staticmethod
    def _pick_project(session: SceneSession, projects: list[Project]) -> Project | None:
        if session.project_id is not None:
            for project in projects:
                if project.id == session.project_id:
                    return project
        if len(projects) == 1:
            return projects[0]
        return None

    async def open_project(
        self, session: SceneSession, project_id: int, user: ChatUser
    ) -> SceneResult:
        """Show a project chosen by a button (own storage bracket)."""
        try:
            async with self.storage.opened():
                project = await self.storage.get_project_by_id(project_id)
                if project is None:
                    return self.stay(
                        session.with_step(None),
                        Reply(text=messages.PROJECT_NOT_FOUND),
                        answer=messages.ANSWER_ERROR,
                    )
                return await self.show_project(session.focus(project.id), project, has_multiple=True)
        except Exception:
            logger.exception(
                "scene_open_project_failed",
                extra={"scene": self.name.value, "project_id": project_id},
            )
            return self.failure(session, self.load_error, answer=messages.ANSWER_ERROR)

    @abstractmethod
    async def show_project(
        self, session: SceneSession, project: Project, has_multiple: bool
    ) -> SceneResult:
        """Render the scene's view of *project*.  Runs inside ``storage.opened()``."""

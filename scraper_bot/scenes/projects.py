"""Projects scene: list, create and open projects.

Entry registers the chat user on first contact, so this is the one scene
that works for users who never sent ``/start``.
"""

from __future__ import annotations

import logging

from scraper_bot.core import messages
from scraper_bot.core.validation import is_valid_project_name
from scraper_bot.models.enums import SceneName, SceneStep
from scraper_bot.models.session import SceneSession
from scraper_bot.models.user import ChatUser
from scraper_bot.scenes import actions, keyboards
from scraper_bot.scenes.base import ActionHandler, Reply, Scene, SceneResult

logger = logging.getLogger(__name__)


class ProjectsScene(Scene):
    name = SceneName.projects
    exit_text = messages.PROJECTS_EXIT
    exit_answer = messages.PROJECTS_EXIT_ANSWER

    async def enter(self, session: SceneSession, user: ChatUser) -> SceneResult:
        try:
            async with self.storage.opened():
                db_user = await self.storage.find_user_by_telegram_id_or_create(user)
                projects = await self.storage.get_projects_by_user_id(db_user.id)
        except Exception:
            logger.exception("projects_enter_failed", extra={"telegram_id": user.telegram_id})
            return self.failure(session, messages.PROJECTS_LOAD_ERROR, leave=True)

        text = messages.PROJECTS_LIST if projects else messages.PROJECTS_EMPTY
        return self.stay(
            session.focus(None, SceneStep.project_list),
            Reply(text=text, keyboard=keyboards.projects_keyboard(projects)),
        )

    def action_handlers(self) -> dict[str, ActionHandler]:
        return {
            **super().action_handlers(),
            "create_project": self.on_create_project,
            "project": self.on_select_project,
            "back_to_projects": self.on_back_to_projects,
        }

    async def on_create_project(
        self, session: SceneSession, action: actions.Action, user: ChatUser
    ) -> SceneResult:
        return self.stay(
            session.with_step(SceneStep.create_project),
            Reply(text=messages.PROJECT_NAME_PROMPT),
        )

    async def on_select_project(
        self, session: SceneSession, action: actions.SelectProject, user: ChatUser
    ) -> SceneResult:
        try:
            async with self.storage.opened():
                project = await self.storage.get_project_by_id(action.project_id)
        except Exception:
            logger.exception("project_open_failed", extra={"project_id": action.project_id})
            return self.failure(session, messages.PROJECT_LOAD_ERROR, answer=messages.ANSWER_ERROR)

        if project is None:
            return self.reenter(
                session.focus(None),
                Reply(text=messages.PROJECT_NOT_FOUND),
                answer=messages.ANSWER_ERROR,
            )
        return self.stay(
            session.focus(project.id),
            Reply(
                text=messages.PROJECT_MENU.format(name=project.name),
                keyboard=keyboards.project_menu_keyboard(project.id),
            ),
        )

    async def on_back_to_projects(
        self, session: SceneSession, action: actions.Action, user: ChatUser
    ) -> SceneResult:
        return self.reenter(session.focus(None))

    async def on_text(self, session: SceneSession, text: str, user: ChatUser) -> SceneResult:
        if session.step != SceneStep.create_project:
            return self.stay(session)

        if not is_valid_project_name(text):
            return self.stay(session, Reply(text=messages.PROJECT_NAME_INVALID))

        name = text.strip()
        try:
            async with self.storage.opened():
                db_user = await self.storage.get_user_by_telegram_id(user.telegram_id)
                if db_user is None:
                    return self.stay(session.with_step(None), Reply(text=messages.USER_NOT_FOUND))
                project = await self.storage.create_project(db_user.id, name)
        except Exception:
            logger.exception(
                "project_create_failed",
                extra={"telegram_id": user.telegram_id, "project_name": name},
            )
            return self.failure(session, messages.PROJECT_CREATE_ERROR)

        logger.info(
            "project_created",
            extra={"telegram_id": user.telegram_id, "project_id": project.id},
        )
        return self.stay(
            session.focus(project.id),
            Reply(
                text=messages.PROJECT_CREATED.format(name=project.name),
                keyboard=keyboards.project_menu_keyboard(project.id),
            ),
        )

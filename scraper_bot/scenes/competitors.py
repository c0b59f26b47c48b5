"""Competitors scene: tracked Instagram accounts of a project."""

from __future__ import annotations

import logging

from scraper_bot.core import messages
from scraper_bot.core.validation import extract_instagram_username
from scraper_bot.models.competitor import Competitor
from scraper_bot.models.enums import SceneName, SceneStep
from scraper_bot.models.project import Project
from scraper_bot.models.session import SceneSession
from scraper_bot.models.user import ChatUser
from scraper_bot.scenes import actions, keyboards
from scraper_bot.scenes.base import ActionHandler, ProjectScopedScene, Reply, SceneResult

logger = logging.getLogger(__name__)


def format_competitor_list(competitors: list[Competitor]) -> str:
    return "\n".join(
        f"{i}. @{c.username} - {c.instagram_url}" for i, c in enumerate(competitors, start=1)
    )


class CompetitorsScene(ProjectScopedScene):
    name = SceneName.competitors
    exit_text = messages.COMPETITORS_EXIT
    select_prompt = messages.COMPETITORS_SELECT_PROJECT
    select_action = actions.CompetitorsProject
    load_error = messages.COMPETITORS_LOAD_ERROR

    async def show_project(
        self, session: SceneSession, project: Project, has_multiple: bool
    ) -> SceneResult:
        competitors = await self.storage.get_competitor_accounts(project.id)
        if competitors:
            text = messages.COMPETITORS_LIST.format(
                name=project.name, items=format_competitor_list(competitors)
            )
        else:
            text = messages.COMPETITORS_EMPTY.format(name=project.name)
        return self.stay(
            session.with_step(SceneStep.competitor_list),
            Reply(
                text=text,
                keyboard=keyboards.competitors_keyboard(
                    project.id, competitors, show_back_to_projects=has_multiple
                ),
            ),
        )

    def action_handlers(self) -> dict[str, ActionHandler]:
        return {
            **super().action_handlers(),
            "competitors_project": self.on_competitors_project,
            "add_competitor": self.on_add_competitor,
            "delete_competitor": self.on_delete_competitor,
            "back_to_projects": self.on_back_to_projects,
        }

    async def on_competitors_project(
        self, session: SceneSession, action: actions.CompetitorsProject, user: ChatUser
    ) -> SceneResult:
        return await self.open_project(session, action.project_id, user)

    async def on_add_competitor(
        self, session: SceneSession, action: actions.AddCompetitor, user: ChatUser
    ) -> SceneResult:
        return self.stay(
            session.focus(action.project_id, SceneStep.add_competitor),
            Reply(text=messages.COMPETITOR_URL_PROMPT),
        )

    async def on_delete_competitor(
        self, session: SceneSession, action: actions.DeleteCompetitor, user: ChatUser
    ) -> SceneResult:
        try:
            async with self.storage.opened():
                deleted = await self.storage.delete_competitor_account(
                    action.project_id, action.username
                )
        except Exception:
            logger.exception(
                "competitor_delete_failed",
                extra={"project_id": action.project_id, "username": action.username},
            )
            return self.failure(
                session, messages.COMPETITOR_DELETE_ERROR, answer=messages.ANSWER_ERROR
            )

        if not deleted:
            return self.stay(
                session,
                Reply(text=messages.COMPETITOR_DELETE_FAILED),
                answer=messages.ANSWER_DELETE_FAILED,
            )
        logger.info(
            "competitor_deleted",
            extra={"project_id": action.project_id, "username": action.username},
        )
        return self.reenter(
            session.focus(action.project_id),
            Reply(text=messages.COMPETITOR_DELETED.format(username=action.username)),
            answer=messages.ANSWER_DELETED,
        )

    async def on_back_to_projects(
        self, session: SceneSession, action: actions.Action, user: ChatUser
    ) -> SceneResult:
        return self.reenter(session.focus(None))

    async def on_text(self, session: SceneSession, text: str, user: ChatUser) -> SceneResult:
        if session.step != SceneStep.add_competitor:
            return self.stay(session)

        if session.project_id is None:
            return self.stay(
                session.with_step(None), Reply(text=messages.COMPETITOR_PROJECT_MISSING)
            )

        username = extract_instagram_username(text)
        if username is None:
            return self.stay(session, Reply(text=messages.COMPETITOR_URL_INVALID))

        project_id = session.project_id
        try:
            async with self.storage.opened():
                competitor = await self.storage.add_competitor_account(
                    project_id, username, text.strip()
                )
        except Exception:
            logger.exception(
                "competitor_add_failed",
                extra={"project_id": project_id, "username": username},
            )
            return self.failure(session, messages.COMPETITOR_ADD_ERROR)

        if competitor is None:
            return self.stay(session.with_step(None), Reply(text=messages.COMPETITOR_ADD_FAILED))

        logger.info(
            "competitor_added",
            extra={"project_id": project_id, "competitor_id": competitor.id},
        )
        return self.stay(
            session.with_step(None),
            Reply(
                text=messages.COMPETITOR_ADDED.format(username=username),
                keyboard=keyboards.competitor_added_keyboard(project_id),
            ),
        )

"""Reels scene: paged list of the reels stored for a project."""

from __future__ import annotations

import html
import logging

from scraper_bot.core import messages
from scraper_bot.core.constants import REELS_PAGE_SIZE
from scraper_bot.models.enums import SceneName, SceneStep
from scraper_bot.models.project import Project
from scraper_bot.models.reel import Reel, ReelsFilter
from scraper_bot.models.session import SceneSession
from scraper_bot.models.user import ChatUser
from scraper_bot.scenes import actions, keyboards
from scraper_bot.scenes.base import ActionHandler, ProjectScopedScene, Reply, SceneResult

logger = logging.getLogger(__name__)


def format_count(value: int) -> str:
    return f"{value:,}".replace(",", " ")


def format_reel(index: int, reel: Reel) -> str:
    author = f"@{reel.author_username}" if reel.author_username else "Reel"
    return messages.REELS_ITEM.format(
        index=index,
        url=html.escape(reel.url, quote=True),
        author=html.escape(author),
        views=format_count(reel.views),
        likes=format_count(reel.likes),
        comments=format_count(reel.comments_count),
        published=reel.published_at.strftime("%d.%m.%Y"),
    )


class ReelsScene(ProjectScopedScene):
    name = SceneName.reels
    exit_text = messages.REELS_EXIT
    select_prompt = messages.REELS_SELECT_PROJECT
    select_action = actions.ShowReels
    load_error = messages.REELS_LOAD_ERROR

    async def show_project(
        self, session: SceneSession, project: Project, has_multiple: bool
    ) -> SceneResult:
        return await self._show_page(session, project, page=1)

    async def _show_page(self, session: SceneSession, project: Project, page: int) -> SceneResult:
        offset = (page - 1) * REELS_PAGE_SIZE
        # One extra row tells whether a next page exists.
        reels = await self.storage.get_reels(
            ReelsFilter(project_id=project.id, limit=REELS_PAGE_SIZE + 1, offset=offset)
        )
        has_next = len(reels) > REELS_PAGE_SIZE
        reels = reels[:REELS_PAGE_SIZE]

        next_session = session.focus(project.id, SceneStep.reels_list)
        if not reels and page == 1:
            return self.stay(
                next_session,
                Reply(
                    text=messages.REELS_EMPTY.format(name=project.name),
                    keyboard=keyboards.project_footer_keyboard(project.id),
                ),
            )

        items = "\n".join(format_reel(offset + i, r) for i, r in enumerate(reels, start=1))
        text = messages.REELS_HEADER.format(name=html.escape(project.name), page=page) + items
        return self.stay(
            next_session,
            Reply(
                text=text,
                keyboard=keyboards.reels_keyboard(project.id, page, has_next),
                parse_mode="HTML",
            ),
        )

    def action_handlers(self) -> dict[str, ActionHandler]:
        return {
            **super().action_handlers(),
            "show_reels": self.on_show_reels,
            "reels_page": self.on_reels_page,
        }

    async def on_show_reels(
        self, session: SceneSession, action: actions.ShowReels, user: ChatUser
    ) -> SceneResult:
        return await self.open_project(session, action.project_id, user)

    async def on_reels_page(
        self, session: SceneSession, action: actions.ReelsPage, user: ChatUser
    ) -> SceneResult:
        page = max(action.page, 1)
        try:
            async with self.storage.opened():
                project = await self.storage.get_project_by_id(action.project_id)
                if project is None:
                    return self.stay(
                        session.with_step(None),
                        Reply(text=messages.PROJECT_NOT_FOUND),
                        answer=messages.ANSWER_ERROR,
                    )
                return await self._show_page(session, project, page)
        except Exception:
            logger.exception(
                "reels_page_failed",
                extra={"project_id": action.project_id, "page": page},
            )
            return self.failure(session, messages.REELS_LOAD_ERROR, answer=messages.ANSWER_ERROR)

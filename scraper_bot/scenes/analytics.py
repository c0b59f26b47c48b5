"""Analytics scene: engagement summary over a project's reels."""

from __future__ import annotations

import html
import logging

from scraper_bot.core import messages
from scraper_bot.models.analytics import ProjectReelStats
from scraper_bot.models.enums import SceneName, SceneStep
from scraper_bot.models.project import Project
from scraper_bot.models.session import SceneSession
from scraper_bot.models.user import ChatUser
from scraper_bot.scenes import actions, keyboards
from scraper_bot.scenes.base import ActionHandler, ProjectScopedScene, Reply, SceneResult
from scraper_bot.scenes.reels import format_count
from scraper_bot.services.analytics import get_project_reel_stats

logger = logging.getLogger(__name__)


def format_report(project: Project, stats: ProjectReelStats) -> str:
    text = messages.ANALYTICS_REPORT.format(
        name=html.escape(project.name),
        total=stats.total_reels,
        from_competitors=stats.from_competitors,
        from_hashtags=stats.from_hashtags,
        total_views=format_count(stats.total_views),
        avg_views=format_count(round(stats.avg_views)),
        avg_likes=format_count(round(stats.avg_likes)),
        avg_comments=format_count(round(stats.avg_comments)),
    )
    if stats.top_reels:
        text += messages.ANALYTICS_TOP_HEADER
        for index, reel in enumerate(stats.top_reels, start=1):
            author = f"@{reel.author_username}" if reel.author_username else "Reel"
            text += messages.ANALYTICS_TOP_ITEM.format(
                index=index,
                url=html.escape(reel.url, quote=True),
                author=html.escape(author),
                views=format_count(reel.views),
            )
    return text


class AnalyticsScene(ProjectScopedScene):
    name = SceneName.analytics
    exit_text = messages.ANALYTICS_EXIT
    select_prompt = messages.ANALYTICS_SELECT_PROJECT
    select_action = actions.AnalyticsProject
    load_error = messages.ANALYTICS_LOAD_ERROR

    async def show_project(
        self, session: SceneSession, project: Project, has_multiple: bool
    ) -> SceneResult:
        stats = await get_project_reel_stats(self.storage, project.id)
        next_session = session.with_step(SceneStep.analytics_report)
        keyboard = keyboards.project_footer_keyboard(project.id)
        if stats.total_reels == 0:
            return self.stay(
                next_session,
                Reply(text=messages.ANALYTICS_EMPTY.format(name=project.name), keyboard=keyboard),
            )
        return self.stay(
            next_session,
            Reply(text=format_report(project, stats), keyboard=keyboard, parse_mode="HTML"),
        )

    def action_handlers(self) -> dict[str, ActionHandler]:
        return {
            **super().action_handlers(),
            "analytics_project": self.on_analytics_project,
        }

    async def on_analytics_project(
        self, session: SceneSession, action: actions.AnalyticsProject, user: ChatUser
    ) -> SceneResult:
        return await self.open_project(session, action.project_id, user)

"""Scraping scene: run Apify scraping for a project's sources.

Batch actions scrape their sources one after another inside a single
storage bracket and stop at the first scraping failure, reporting what
completed so far.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass

from scraper_bot.core import messages
from scraper_bot.core.constants import SCRAPING_MENU_PREVIEW
from scraper_bot.db.base import StorageAdapter
from scraper_bot.models.enums import SceneName, SceneStep, SourceType
from scraper_bot.models.project import Project
from scraper_bot.models.session import SceneSession
from scraper_bot.models.user import ChatUser
from scraper_bot.scenes import actions, keyboards
from scraper_bot.scenes.base import ActionHandler, ProjectScopedScene, Reply, SceneResult
from scraper_bot.services.parsing import hashtag_target, parse_source
from scraper_bot.services.scraping import ApifyReelsScraper, ScrapeOptions

logger = logging.getLogger(__name__)

HTML = "HTML"


@dataclass(frozen=True)
class Source:
    source_type: SourceType
    source_id: int
    target: str
    label: str


def _preview(lines: list[str]) -> str:
    text = "".join(f"• {line}\n" for line in lines[:SCRAPING_MENU_PREVIEW])
    if len(lines) > SCRAPING_MENU_PREVIEW:
        text += messages.SCRAPING_MORE.format(count=len(lines) - SCRAPING_MENU_PREVIEW)
    return text


class ScrapingScene(ProjectScopedScene):
    name = SceneName.scraping
    exit_text = messages.SCRAPING_EXIT
    select_prompt = messages.SCRAPING_SELECT_PROJECT
    select_action = actions.ScrapeProject
    load_error = messages.SCRAPING_LOAD_ERROR

    def __init__(
        self,
        storage: StorageAdapter,
        scraper: ApifyReelsScraper | None,
        options: ScrapeOptions | None = None,
    ) -> None:
        super().__init__(storage)
        self.scraper = scraper
        self.options = options or ScrapeOptions()

    async def show_project(
        self, session: SceneSession, project: Project, has_multiple: bool
    ) -> SceneResult:
        competitors = await self.storage.get_competitor_accounts(project.id)
        hashtags = await self.storage.get_hashtags_by_project_id(project.id)

        text = messages.SCRAPING_MENU_HEADER.format(name=html.escape(project.name))
        if not competitors and not hashtags:
            return self.stay(
                session.with_step(SceneStep.scraping_menu),
                Reply(
                    text=text + messages.SCRAPING_NO_SOURCES,
                    keyboard=keyboards.scraping_no_sources_keyboard(project.id),
                    parse_mode=HTML,
                ),
            )

        text += messages.SCRAPING_CHOOSE_SOURCE
        if competitors:
            text += messages.SCRAPING_COMPETITORS_HEADER.format(count=len(competitors))
            text += _preview([f"@{html.escape(c.username)}" for c in competitors]) + "\n"
        if hashtags:
            text += messages.SCRAPING_HASHTAGS_HEADER.format(count=len(hashtags))
            text += _preview([f"#{html.escape(h.hashtag)}" for h in hashtags])

        return self.stay(
            session.with_step(SceneStep.scraping_menu),
            Reply(
                text=text,
                keyboard=keyboards.scraping_menu_keyboard(
                    project.id, bool(competitors), bool(hashtags)
                ),
                parse_mode=HTML,
            ),
        )

    def action_handlers(self) -> dict[str, ActionHandler]:
        return {
            **super().action_handlers(),
            "scrape_project": self.on_scrape_project,
            "back_to_scraping_menu": self.on_back_to_menu,
            "scrape_competitors": self.on_list_competitors,
            "scrape_hashtags": self.on_list_hashtags,
            "scrape_competitor": self.on_scrape_competitor,
            "scrape_hashtag": self.on_scrape_hashtag,
            "scrape_all_competitors": self.on_scrape_all_competitors,
            "scrape_all_hashtags": self.on_scrape_all_hashtags,
            "scrape_all": self.on_scrape_all,
        }

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    async def on_scrape_project(
        self, session: SceneSession, action: actions.ScrapeProject, user: ChatUser
    ) -> SceneResult:
        return await self.open_project(session, action.project_id, user)

    async def on_back_to_menu(
        self, session: SceneSession, action: actions.Action, user: ChatUser
    ) -> SceneResult:
        return self.reenter(session)

    async def on_list_competitors(
        self, session: SceneSession, action: actions.ScrapeCompetitors, user: ChatUser
    ) -> SceneResult:
        try:
            async with self.storage.opened():
                competitors = await self.storage.get_competitor_accounts(action.project_id)
        except Exception:
            logger.exception("scraping_competitors_load_failed", extra={"project_id": action.project_id})
            return self.failure(session, messages.SCRAPING_LOAD_ERROR, answer=messages.ANSWER_ERROR)

        next_session = session.focus(action.project_id, SceneStep.scraping_competitors)
        if not competitors:
            return self.stay(
                next_session,
                Reply(
                    text=messages.SCRAPING_NO_COMPETITORS,
                    keyboard=keyboards.back_to_scraping_menu_keyboard(),
                ),
            )
        return self.stay(
            next_session,
            Reply(
                text=messages.SCRAPING_PICK_COMPETITORS,
                keyboard=keyboards.scraping_competitors_keyboard(action.project_id, competitors),
                parse_mode=HTML,
            ),
        )

    async def on_list_hashtags(
        self, session: SceneSession, action: actions.ScrapeHashtags, user: ChatUser
    ) -> SceneResult:
        try:
            async with self.storage.opened():
                hashtags = await self.storage.get_hashtags_by_project_id(action.project_id)
        except Exception:
            logger.exception("scraping_hashtags_load_failed", extra={"project_id": action.project_id})
            return self.failure(session, messages.SCRAPING_LOAD_ERROR, answer=messages.ANSWER_ERROR)

        next_session = session.focus(action.project_id, SceneStep.scraping_hashtags)
        if not hashtags:
            return self.stay(
                next_session,
                Reply(
                    text=messages.SCRAPING_NO_HASHTAGS,
                    keyboard=keyboards.back_to_scraping_menu_keyboard(),
                ),
            )
        return self.stay(
            next_session,
            Reply(
                text=messages.SCRAPING_PICK_HASHTAGS,
                keyboard=keyboards.scraping_hashtags_keyboard(action.project_id, hashtags),
                parse_mode=HTML,
            ),
        )

    # ------------------------------------------------------------------
    # Scraping runs
    # ------------------------------------------------------------------

    async def _competitor_sources(self, project_id: int, competitor_id: int | None = None) -> list[Source]:
        competitors = await self.storage.get_competitor_accounts(project_id)
        return [
            Source(SourceType.competitor, c.id, c.username, f"@{c.username}")
            for c in competitors
            if competitor_id is None or c.id == competitor_id
        ]

    async def _hashtag_sources(self, project_id: int, hashtag_id: int | None = None) -> list[Source]:
        hashtags = await self.storage.get_hashtags_by_project_id(project_id)
        return [
            Source(SourceType.hashtag, h.id, hashtag_target(h.hashtag), f"#{h.hashtag}")
            for h in hashtags
            if hashtag_id is None or h.id == hashtag_id
        ]

    async def on_scrape_competitor(
        self, session: SceneSession, action: actions.ScrapeCompetitor, user: ChatUser
    ) -> SceneResult:
        return await self._run(
            session,
            action.project_id,
            lambda: self._competitor_sources(action.project_id, action.competitor_id),
        )

    async def on_scrape_hashtag(
        self, session: SceneSession, action: actions.ScrapeHashtag, user: ChatUser
    ) -> SceneResult:
        return await self._run(
            session,
            action.project_id,
            lambda: self._hashtag_sources(action.project_id, action.hashtag_id),
        )

    async def on_scrape_all_competitors(
        self, session: SceneSession, action: actions.ScrapeAllCompetitors, user: ChatUser
    ) -> SceneResult:
        return await self._run(
            session, action.project_id, lambda: self._competitor_sources(action.project_id)
        )

    async def on_scrape_all_hashtags(
        self, session: SceneSession, action: actions.ScrapeAllHashtags, user: ChatUser
    ) -> SceneResult:
        return await self._run(
            session, action.project_id, lambda: self._hashtag_sources(action.project_id)
        )

    async def on_scrape_all(
        self, session: SceneSession, action: actions.ScrapeAll, user: ChatUser
    ) -> SceneResult:
        async def load() -> list[Source]:
            return await self._competitor_sources(action.project_id) + await self._hashtag_sources(
                action.project_id
            )

        return await self._run(session, action.project_id, load)

    async def _run(self, session: SceneSession, project_id: int, load_sources) -> SceneResult:
        """Scrape the sources returned by *load_sources* sequentially."""
        next_session = session.focus(project_id, SceneStep.scraping_menu)
        if self.scraper is None:
            return self.stay(
                next_session,
                Reply(text=messages.SCRAPING_UNAVAILABLE),
                answer=messages.ANSWER_ERROR,
            )

        lines: list[str] = []
        done = 0
        added = 0
        try:
            async with self.storage.opened():
                sources = await load_sources()
                if not sources:
                    return self.stay(
                        next_session,
                        Reply(
                            text=messages.SCRAPING_SOURCE_NOT_FOUND,
                            keyboard=keyboards.back_to_scraping_menu_keyboard(),
                        ),
                        answer=messages.ANSWER_ERROR,
                    )

                for source in sources:
                    try:
                        result = await parse_source(
                            self.storage,
                            self.scraper,
                            project_id,
                            source.source_type,
                            source.source_id,
                            source.target,
                            self.options,
                        )
                    except Exception:
                        logger.exception(
                            "scraping_source_failed",
                            extra={
                                "project_id": project_id,
                                "source_type": source.source_type.value,
                                "source_id": source.source_id,
                            },
                        )
                        lines.append(messages.SCRAPING_SOURCE_FAILED.format(source=source.label))
                        break
                    done += 1
                    added += result.added
                    lines.append(
                        messages.SCRAPING_SOURCE_DONE.format(
                            source=source.label, found=result.found, added=result.added
                        )
                    )
        except Exception:
            logger.exception("scraping_run_failed", extra={"project_id": project_id})
            return self.failure(session, messages.SCRAPING_ERROR, answer=messages.ANSWER_ERROR)

        lines.append(messages.SCRAPING_SUMMARY.format(done=done, total=len(sources), added=added))
        return self.stay(
            next_session,
            Reply(text="\n".join(lines), keyboard=keyboards.back_to_scraping_menu_keyboard()),
        )

"""Inline keyboards of the scenes.

Buttons are built from action models so every ``callback_data`` here is
something ``parse_callback`` understands.  A button whose payload exceeds
Telegram's 64-byte limit is left out (long usernames / hashtags).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from scraper_bot.core import messages
from scraper_bot.core.constants import CALLBACK_DATA_MAX_BYTES
from scraper_bot.models.competitor import Competitor
from scraper_bot.models.hashtag import Hashtag
from scraper_bot.models.project import Project
from scraper_bot.scenes import actions

logger = logging.getLogger(__name__)


def button(text: str, action: actions.Action) -> InlineKeyboardButton | None:
    payload = action.payload
    if len(payload.encode("utf-8")) > CALLBACK_DATA_MAX_BYTES:
        logger.warning("callback_data_too_long", extra={"payload": payload})
        return None
    return InlineKeyboardButton(text=text, callback_data=payload)


def build(rows: Sequence[Sequence[InlineKeyboardButton | None]]) -> InlineKeyboardMarkup:
    """One keyboard row per entry; ``None`` buttons and empty rows are dropped."""
    builder = InlineKeyboardBuilder()
    for row in rows:
        buttons = [b for b in row if b is not None]
        if buttons:
            builder.row(*buttons)
    return builder.as_markup()


def _exit_row() -> list[InlineKeyboardButton | None]:
    return [button(messages.BUTTON_EXIT, actions.ExitScene())]


def _back_to_project_row(project_id: int) -> list[InlineKeyboardButton | None]:
    return [button(messages.BUTTON_BACK_TO_PROJECT, actions.SelectProject(project_id=project_id))]


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

def projects_keyboard(projects: Sequence[Project]) -> InlineKeyboardMarkup:
    if not projects:
        return build([[button(messages.BUTTON_CREATE_PROJECT, actions.CreateProject())], _exit_row()])

    rows: list[list[InlineKeyboardButton | None]] = []
    for project in projects:
        template = messages.BUTTON_PROJECT_ACTIVE if project.is_active else messages.BUTTON_PROJECT_INACTIVE
        rows.append([button(template.format(name=project.name), actions.SelectProject(project_id=project.id))])
    rows.append([button(messages.BUTTON_CREATE_NEW_PROJECT, actions.CreateProject())])
    rows.append(_exit_row())
    return build(rows)


def project_menu_keyboard(project_id: int) -> InlineKeyboardMarkup:
    return build(
        [
            [button(messages.BUTTON_PROJECT_COMPETITORS, actions.CompetitorsProject(project_id=project_id))],
            [button(messages.BUTTON_PROJECT_HASHTAGS, actions.ManageHashtags(project_id=project_id))],
            [button(messages.BUTTON_PROJECT_SCRAPING, actions.ScrapeProject(project_id=project_id))],
            [button(messages.BUTTON_PROJECT_REELS, actions.ShowReels(project_id=project_id))],
            [button(messages.BUTTON_PROJECT_ANALYTICS, actions.AnalyticsProject(project_id=project_id))],
            [button(messages.BUTTON_TO_PROJECT_LIST, actions.BackToProjects())],
        ]
    )


def project_selection_keyboard(
    projects: Sequence[Project], action_type: type[actions.Action]
) -> InlineKeyboardMarkup:
    """One button per project, each carrying ``action_type(project_id=...)``."""
    rows = [[button(p.name, action_type(project_id=p.id))] for p in projects]
    rows.append(_exit_row())
    return build(rows)


# ---------------------------------------------------------------------------
# Competitors
# ---------------------------------------------------------------------------

def competitors_keyboard(
    project_id: int,
    competitors: Sequence[Competitor],
    show_back_to_projects: bool = False,
) -> InlineKeyboardMarkup:
    rows: list[list[InlineKeyboardButton | None]] = [
        [
            button(
                messages.BUTTON_DELETE_COMPETITOR.format(username=c.username),
                actions.DeleteCompetitor(project_id=project_id, username=c.username),
            )
        ]
        for c in competitors
    ]
    rows.append([button(messages.BUTTON_ADD_COMPETITOR, actions.AddCompetitor(project_id=project_id))])
    if show_back_to_projects:
        rows.append([button(messages.BUTTON_BACK_TO_PROJECTS, actions.BackToProjects())])
    rows.append(_exit_row())
    return build(rows)


def competitor_added_keyboard(project_id: int) -> InlineKeyboardMarkup:
    return build(
        [
            [button(messages.BUTTON_VIEW_ALL_COMPETITORS, actions.CompetitorsProject(project_id=project_id))],
            [button(messages.BUTTON_ADD_MORE_COMPETITOR, actions.AddCompetitor(project_id=project_id))],
            _exit_row(),
        ]
    )


# ---------------------------------------------------------------------------
# Hashtags
# ---------------------------------------------------------------------------

def hashtags_keyboard(project_id: int, hashtags: Sequence[Hashtag]) -> InlineKeyboardMarkup:
    rows: list[list[InlineKeyboardButton | None]] = [
        [
            button(
                messages.BUTTON_DELETE_HASHTAG.format(hashtag=h.hashtag),
                actions.DeleteHashtag(project_id=project_id, hashtag=h.hashtag),
            )
        ]
        for h in hashtags
    ]
    rows.append([button(messages.BUTTON_ADD_HASHTAG, actions.AddHashtag(project_id=project_id))])
    rows.append(_back_to_project_row(project_id))
    rows.append(_exit_row())
    return build(rows)


def hashtag_input_keyboard(project_id: int) -> InlineKeyboardMarkup:
    return build([[button(messages.BUTTON_CANCEL, actions.CancelHashtagInput(project_id=project_id))]])


# ---------------------------------------------------------------------------
# Scraping
# ---------------------------------------------------------------------------

def scraping_no_sources_keyboard(project_id: int) -> InlineKeyboardMarkup:
    return build(
        [
            [button(messages.BUTTON_ADD_COMPETITORS, actions.CompetitorsProject(project_id=project_id))],
            [button(messages.BUTTON_ADD_HASHTAGS, actions.ManageHashtags(project_id=project_id))],
            _back_to_project_row(project_id),
        ]
    )


def scraping_menu_keyboard(
    project_id: int, has_competitors: bool, has_hashtags: bool
) -> InlineKeyboardMarkup:
    rows: list[list[InlineKeyboardButton | None]] = []
    if has_competitors:
        rows.append([button(messages.BUTTON_SCRAPE_COMPETITORS, actions.ScrapeCompetitors(project_id=project_id))])
    if has_hashtags:
        rows.append([button(messages.BUTTON_SCRAPE_HASHTAGS, actions.ScrapeHashtags(project_id=project_id))])
    rows.append([button(messages.BUTTON_SCRAPE_ALL, actions.ScrapeAll(project_id=project_id))])
    rows.append(_back_to_project_row(project_id))
    rows.append(_exit_row())
    return build(rows)


def scraping_competitors_keyboard(
    project_id: int, competitors: Sequence[Competitor]
) -> InlineKeyboardMarkup:
    rows: list[list[InlineKeyboardButton | None]] = [
        [
            button(
                f"@{c.username}",
                actions.ScrapeCompetitor(project_id=project_id, competitor_id=c.id),
            )
        ]
        for c in competitors
    ]
    rows.append(
        [button(messages.BUTTON_SCRAPE_ALL_COMPETITORS, actions.ScrapeAllCompetitors(project_id=project_id))]
    )
    rows.append([button(messages.BUTTON_BACK, actions.BackToScrapingMenu())])
    return build(rows)


def scraping_hashtags_keyboard(project_id: int, hashtags: Sequence[Hashtag]) -> InlineKeyboardMarkup:
    rows: list[list[InlineKeyboardButton | None]] = [
        [button(f"#{h.hashtag}", actions.ScrapeHashtag(project_id=project_id, hashtag_id=h.id))]
        for h in hashtags
    ]
    rows.append([button(messages.BUTTON_SCRAPE_ALL_HASHTAGS, actions.ScrapeAllHashtags(project_id=project_id))])
    rows.append([button(messages.BUTTON_BACK, actions.BackToScrapingMenu())])
    return build(rows)


def back_to_scraping_menu_keyboard() -> InlineKeyboardMarkup:
    return build([[button(messages.BUTTON_BACK, actions.BackToScrapingMenu())], _exit_row()])


# ---------------------------------------------------------------------------
# Reels / analytics
# ---------------------------------------------------------------------------

def reels_keyboard(project_id: int, page: int, has_next: bool) -> InlineKeyboardMarkup:
    nav: list[InlineKeyboardButton | None] = []
    if page > 1:
        nav.append(button(messages.BUTTON_PREV_PAGE, actions.ReelsPage(project_id=project_id, page=page - 1)))
    if has_next:
        nav.append(button(messages.BUTTON_NEXT_PAGE, actions.ReelsPage(project_id=project_id, page=page + 1)))
    return build([nav, _back_to_project_row(project_id), _exit_row()])


def project_footer_keyboard(project_id: int) -> InlineKeyboardMarkup:
    return build([_back_to_project_row(project_id), _exit_row()])

"""Callback actions of the inline keyboards.

Every button carries a ``callback_data`` payload such as
``delete_competitor_12_some_user``.  ``parse_callback`` is the single
place that turns a payload into a typed action; keyboards build payloads
from the same action models, so both directions share one table.
"""

from __future__ import annotations

import re
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class Action(BaseModel):
    model_config = ConfigDict(frozen=True)

    @property
    def payload(self) -> str:
        """``kind`` followed by the field values, joined with ``_``."""
        return "_".join(str(value) for _, value in self)


# ---------------------------------------------------------------------------
# Actions without arguments
# ---------------------------------------------------------------------------

class ExitScene(Action):
    kind: Literal["exit_scene"] = "exit_scene"


class BackToProjects(Action):
    kind: Literal["back_to_projects"] = "back_to_projects"


class CreateProject(Action):
    kind: Literal["create_project"] = "create_project"


class BackToScrapingMenu(Action):
    kind: Literal["back_to_scraping_menu"] = "back_to_scraping_menu"


# ---------------------------------------------------------------------------
# Project-scoped actions
# ---------------------------------------------------------------------------

class SelectProject(Action):
    kind: Literal["project"] = "project"
    project_id: int


class CompetitorsProject(Action):
    kind: Literal["competitors_project"] = "competitors_project"
    project_id: int


class AddCompetitor(Action):
    kind: Literal["add_competitor"] = "add_competitor"
    project_id: int


class DeleteCompetitor(Action):
    kind: Literal["delete_competitor"] = "delete_competitor"
    project_id: int
    username: str


class AddHashtag(Action):
    kind: Literal["add_hashtag"] = "add_hashtag"
    project_id: int


class CancelHashtagInput(Action):
    kind: Literal["cancel_hashtag_input"] = "cancel_hashtag_input"
    project_id: int


class DeleteHashtag(Action):
    kind: Literal["delete_hashtag"] = "delete_hashtag"
    project_id: int
    hashtag: str


class ManageHashtags(Action):
    kind: Literal["manage_hashtags"] = "manage_hashtags"
    project_id: int


class ScrapeProject(Action):
    kind: Literal["scrape_project"] = "scrape_project"
    project_id: int


class ScrapeCompetitors(Action):
    kind: Literal["scrape_competitors"] = "scrape_competitors"
    project_id: int


class ScrapeHashtags(Action):
    kind: Literal["scrape_hashtags"] = "scrape_hashtags"
    project_id: int


class ScrapeCompetitor(Action):
    kind: Literal["scrape_competitor"] = "scrape_competitor"
    project_id: int
    competitor_id: int


class ScrapeHashtag(Action):
    kind: Literal["scrape_hashtag"] = "scrape_hashtag"
    project_id: int
    hashtag_id: int


class ScrapeAllCompetitors(Action):
    kind: Literal["scrape_all_competitors"] = "scrape_all_competitors"
    project_id: int


class ScrapeAllHashtags(Action):
    kind: Literal["scrape_all_hashtags"] = "scrape_all_hashtags"
    project_id: int


class ScrapeAll(Action):
    kind: Literal["scrape_all"] = "scrape_all"
    project_id: int


class ShowReels(Action):
    kind: Literal["show_reels"] = "show_reels"
    project_id: int


class ReelsPage(Action):
    kind: Literal["reels_page"] = "reels_page"
    project_id: int
    page: int


class AnalyticsProject(Action):
    kind: Literal["analytics_project"] = "analytics_project"
    project_id: int


# ---------------------------------------------------------------------------
# Parse failures
# ---------------------------------------------------------------------------

class InvalidPayload(Action):
    """A known prefix whose arguments do not parse (e.g. non-numeric id)."""
    kind: Literal["invalid_payload"] = "invalid_payload"
    prefix: str
    raw: str


class UnknownPayload(Action):
    kind: Literal["unknown_payload"] = "unknown_payload"
    raw: str


CallbackAction = Annotated[
    Union[
        ExitScene,
        BackToProjects,
        CreateProject,
        BackToScrapingMenu,
        SelectProject,
        CompetitorsProject,
        AddCompetitor,
        DeleteCompetitor,
        AddHashtag,
        CancelHashtagInput,
        DeleteHashtag,
        ManageHashtags,
        ScrapeProject,
        ScrapeCompetitors,
        ScrapeHashtags,
        ScrapeCompetitor,
        ScrapeHashtag,
        ScrapeAllCompetitors,
        ScrapeAllHashtags,
        ScrapeAll,
        ShowReels,
        ReelsPage,
        AnalyticsProject,
        InvalidPayload,
        UnknownPayload,
    ],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

_EXACT: dict[str, type[Action]] = {
    "exit_scene": ExitScene,
    "back_to_projects": BackToProjects,
    "create_project": CreateProject,
    "back_to_scraping_menu": BackToScrapingMenu,
}

_ID = r"(?P<project_id>\d+)"

# prefix -> (argument pattern, action type)
_PREFIXED: dict[str, tuple[re.Pattern[str], type[Action]]] = {
    "project": (re.compile(_ID), SelectProject),
    "competitors_project": (re.compile(_ID), CompetitorsProject),
    "add_competitor": (re.compile(_ID), AddCompetitor),
    "delete_competitor": (re.compile(_ID + r"_(?P<username>.+)"), DeleteCompetitor),
    "add_hashtag": (re.compile(_ID), AddHashtag),
    "cancel_hashtag_input": (re.compile(_ID), CancelHashtagInput),
    "delete_hashtag": (re.compile(_ID + r"_(?P<hashtag>.+)"), DeleteHashtag),
    "manage_hashtags": (re.compile(_ID), ManageHashtags),
    "scrape_project": (re.compile(_ID), ScrapeProject),
    "scrape_competitors": (re.compile(_ID), ScrapeCompetitors),
    "scrape_hashtags": (re.compile(_ID), ScrapeHashtags),
    "scrape_competitor": (re.compile(_ID + r"_(?P<competitor_id>\d+)"), ScrapeCompetitor),
    "scrape_hashtag": (re.compile(_ID + r"_(?P<hashtag_id>\d+)"), ScrapeHashtag),
    "scrape_all_competitors": (re.compile(_ID), ScrapeAllCompetitors),
    "scrape_all_hashtags": (re.compile(_ID), ScrapeAllHashtags),
    "scrape_all": (re.compile(_ID), ScrapeAll),
    "show_reels": (re.compile(_ID), ShowReels),
    "reels_page": (re.compile(_ID + r"_(?P<page>\d+)"), ReelsPage),
    "analytics_project": (re.compile(_ID), AnalyticsProject),
}

# Longest prefix first: "scrape_all_competitors_1" must not be read as "scrape_all".
_PREFIX_ORDER = sorted(_PREFIXED, key=len, reverse=True)


def parse_callback(payload: str) -> CallbackAction:
    """Turn a ``callback_data`` string into an action.

    Never raises: a known prefix with unparseable arguments yields
    ``InvalidPayload``, anything else ``UnknownPayload``.
    """
    exact = _EXACT.get(payload)
    if exact is not None:
        return exact()

    for prefix in _PREFIX_ORDER:
        if not payload.startswith(prefix + "_"):
            continue
        pattern, action_type = _PREFIXED[prefix]
        match = pattern.fullmatch(payload[len(prefix) + 1:])
        if match is None:
            return InvalidPayload(prefix=prefix, raw=payload)
        return action_type(**match.groupdict())

    return UnknownPayload(raw=payload)

"""Sections that are announced in the menu but not built yet."""

from __future__ import annotations

from scraper_bot.core import messages
from scraper_bot.core.constants import SECTION_TITLES
from scraper_bot.db.base import StorageAdapter
from scraper_bot.models.enums import SceneName
from scraper_bot.models.session import SceneSession
from scraper_bot.models.user import ChatUser
from scraper_bot.scenes.base import Reply, Scene, SceneResult


class PlaceholderScene(Scene):
    """Replies with an "under construction" notice and leaves at once."""

    def __init__(self, storage: StorageAdapter, name: SceneName) -> None:
        super().__init__(storage)
        self.name = name

    async def enter(self, session: SceneSession, user: ChatUser) -> SceneResult:
        title = SECTION_TITLES.get(self.name, self.name.value)
        return self.leave(session, Reply(text=messages.SECTION_UNDER_CONSTRUCTION.format(title=title)))

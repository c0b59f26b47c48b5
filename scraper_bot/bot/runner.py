"""Scene registry and transition runner.

``SceneRunner`` is the only place that knows about more than one scene:
it routes a parsed callback action or a text message to the right scene,
then follows ``reenter``/``enter`` transitions (bounded by
``MAX_SCENE_HOPS``) and folds the replies of every hop into one result.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from scraper_bot.core import messages
from scraper_bot.core.config import Settings
from scraper_bot.core.constants import MAX_SCENE_HOPS, SECTION_TITLES
from scraper_bot.db.base import StorageAdapter
from scraper_bot.models.enums import SceneName
from scraper_bot.models.session import SceneSession
from scraper_bot.models.user import ChatUser
from scraper_bot.scenes import actions
from scraper_bot.scenes.analytics import AnalyticsScene
from scraper_bot.scenes.base import Scene, SceneResult, Transition, invalid_payload_result
from scraper_bot.scenes.competitors import CompetitorsScene
from scraper_bot.scenes.hashtags import HashtagsScene
from scraper_bot.scenes.placeholders import PlaceholderScene
from scraper_bot.scenes.projects import ProjectsScene
from scraper_bot.scenes.reels import ReelsScene
from scraper_bot.scenes.scraping import ScrapingScene
from scraper_bot.services.scraping import ApifyReelsScraper, ScrapeOptions

logger = logging.getLogger(__name__)


class SceneRunner:
    def __init__(self, scenes: Iterable[Scene]) -> None:
        # Registration order decides which scene owns a shared action.
        self.scenes: dict[SceneName, Scene] = {scene.name: scene for scene in scenes}

    def get(self, name: SceneName) -> Scene:
        return self.scenes[name]

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def enter(self, name: SceneName, user: ChatUser) -> SceneResult:
        """Start *name* from a fresh session (command or menu button)."""
        logger.info("scene_enter", extra={"scene": name.value, "telegram_id": user.telegram_id})
        result = await self.get(name).enter(SceneSession(scene=name), user)
        return await self._follow(result, user)

    async def handle_callback(
        self, session: SceneSession, payload: str, user: ChatUser
    ) -> SceneResult:
        action = actions.parse_callback(payload)

        if isinstance(action, actions.UnknownPayload):
            logger.info("unknown_callback_payload", extra={"payload": payload})
            return SceneResult(session=session, callback_answer=messages.ANSWER_UNAVAILABLE)
        if isinstance(action, actions.InvalidPayload):
            return invalid_payload_result(session, action)

        scene = self.scenes.get(session.scene) if session.scene is not None else None
        if scene is None or not scene.handles(action):
            # Button from another scene's message (or a stale one).
            if isinstance(action, actions.ExitScene):
                return SceneResult(session=SceneSession())
            owner = self._owner(action)
            if owner is None:
                return SceneResult(session=session, callback_answer=messages.ANSWER_UNAVAILABLE)
            scene = owner
            session = SceneSession(scene=owner.name, project_id=session.project_id)

        result = await scene.on_action(session, action, user)
        return await self._follow(result, user)

    async def handle_text(self, session: SceneSession, text: str, user: ChatUser) -> SceneResult:
        if session.scene is None or session.step is None:
            return SceneResult(session=session)
        scene = self.scenes.get(session.scene)
        if scene is None:
            return SceneResult(session=SceneSession())
        result = await scene.on_text(session, text, user)
        return await self._follow(result, user)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _owner(self, action: actions.Action) -> Scene | None:
        for scene in self.scenes.values():
            if scene.handles(action):
                return scene
        return None

    async def _follow(self, result: SceneResult, user: ChatUser) -> SceneResult:
        replies = list(result.replies)
        answer = result.callback_answer
        delete_origin = result.delete_origin
        current = result
        hops = 0

        while current.transition in (Transition.reenter, Transition.enter):
            if hops >= MAX_SCENE_HOPS:
                logger.warning(
                    "scene_hop_limit_reached",
                    extra={"scene": current.session.scene, "hops": hops},
                )
                break
            hops += 1

            if current.transition == Transition.reenter:
                session = current.session
            else:
                session = SceneSession(scene=current.target, project_id=current.session.project_id)
            if session.scene is None:
                current = current.model_copy(update={"transition": Transition.leave})
                break

            current = await self.get(session.scene).enter(session, user)
            replies.extend(current.replies)
            answer = answer or current.callback_answer
            delete_origin = delete_origin or current.delete_origin

        if current.transition == Transition.leave:
            return SceneResult(
                session=SceneSession(),
                replies=replies,
                callback_answer=answer,
                transition=Transition.leave,
                delete_origin=delete_origin,
            )
        return SceneResult(
            session=current.session,
            replies=replies,
            callback_answer=answer,
            delete_origin=delete_origin,
        )


def build_runner(
    storage: StorageAdapter,
    scraper: ApifyReelsScraper | None,
    settings: Settings,
) -> SceneRunner:
    """Register every scene with its collaborators."""
    scenes: list[Scene] = [
        ProjectsScene(storage),
        CompetitorsScene(storage),
        HashtagsScene(storage),
        ScrapingScene(storage, scraper, ScrapeOptions.from_settings(settings)),
        ReelsScene(storage),
        AnalyticsScene(storage),
    ]
    scenes.extend(PlaceholderScene(storage, name) for name in SECTION_TITLES)
    return SceneRunner(scenes)

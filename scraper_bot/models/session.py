"""Per-conversation scene session.

The session is an immutable value: scene transitions return a new session
built with ``model_copy(update=...)`` instead of mutating the current one.
"""

from pydantic import BaseModel, ConfigDict

from scraper_bot.models.enums import SceneName, SceneStep


class SceneSession(BaseModel):
    """Active scene, current step and the project in focus."""
    model_config = ConfigDict(frozen=True)

    scene: SceneName | None = None
    step: SceneStep | None = None
    project_id: int | None = None

    def with_step(self, step: SceneStep | None) -> "SceneSession":
        return self.model_copy(update={"step": step})

    def focus(self, project_id: int | None, step: SceneStep | None = None) -> "SceneSession":
        return self.model_copy(update={"project_id": project_id, "step": step})

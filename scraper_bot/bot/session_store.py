"""Scene session persistence in the aiogram FSM storage.

The session is stored as plain JSON data under one key, so any FSM
storage backend (memory, redis) can hold it.
"""

from __future__ import annotations

import logging

from aiogram.fsm.context import FSMContext
from pydantic import ValidationError

from scraper_bot.models.session import SceneSession

logger = logging.getLogger(__name__)

SESSION_KEY = "scene_session"


async def load_session(state: FSMContext) -> SceneSession:
    data = await state.get_data()
    raw = data.get(SESSION_KEY)
    if not raw:
        return SceneSession()
    try:
        return SceneSession.model_validate(raw)
    except ValidationError:
        logger.warning("scene_session_discarded", extra={"raw": raw})
        return SceneSession()


async def save_session(state: FSMContext, session: SceneSession) -> None:
    await state.update_data({SESSION_KEY: session.model_dump(mode="json")})

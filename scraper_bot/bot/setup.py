"""Bot and dispatcher construction."""

from __future__ import annotations

import logging

from aiogram import Bot, Dispatcher
from aiogram.fsm.storage.memory import MemoryStorage, SimpleEventIsolation

from scraper_bot.bot.handlers import router
from scraper_bot.bot.menu import bot_commands
from scraper_bot.bot.runner import SceneRunner
from scraper_bot.core.config import Settings
from scraper_bot.core.exceptions import BotConfigError
from scraper_bot.db.base import StorageAdapter

logger = logging.getLogger(__name__)


def create_bot(settings: Settings) -> Bot:
    if not settings.TELEGRAM_BOT_TOKEN:
        raise BotConfigError("TELEGRAM_BOT_TOKEN is not set")
    return Bot(token=settings.TELEGRAM_BOT_TOKEN)


def create_dispatcher(runner: SceneRunner, storage: StorageAdapter) -> Dispatcher:
    """Dispatcher with in-memory FSM storage; runner and adapter as workflow data.

    ``SimpleEventIsolation`` handles the updates of one chat one at a time:
    a handler loads the scene session and saves it when done, so two
    updates of the same chat must not interleave.  Other chats run
    concurrently.
    """
    dp = Dispatcher(
        storage=MemoryStorage(),
        events_isolation=SimpleEventIsolation(),
        runner=runner,
        storage_adapter=storage,
    )
    dp.include_router(router)
    return dp


async def set_bot_commands(bot: Bot) -> None:
    await bot.set_my_commands(bot_commands())
    logger.info("bot_commands_registered", extra={"count": len(bot_commands())})

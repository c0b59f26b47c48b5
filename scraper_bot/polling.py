"""Long-polling entry point (``scraper-bot`` console script).

Runs the same dispatcher as the webhook app, without FastAPI; any webhook
left registered on the bot is dropped first.
"""

import asyncio
import logging

from scraper_bot.bot.runner import build_runner
from scraper_bot.bot.setup import create_bot, create_dispatcher, set_bot_commands
from scraper_bot.core.config import settings
from scraper_bot.core.logging import setup_logging
from scraper_bot.db.factory import create_storage_adapter
from scraper_bot.scheduler.jobs import shutdown_scheduler, start_scheduler
from scraper_bot.services.scraping import create_scraper

logger = logging.getLogger(__name__)


async def run_polling() -> None:
    storage = create_storage_adapter(settings)
    scraper = create_scraper(settings)
    bot = create_bot(settings)
    dispatcher = create_dispatcher(build_runner(storage, scraper, settings), storage)

    await bot.delete_webhook(drop_pending_updates=False)
    await set_bot_commands(bot)
    start_scheduler(storage, scraper, settings)
    logger.info("polling_started")
    try:
        await dispatcher.start_polling(bot)
    finally:
        shutdown_scheduler()
        await bot.session.close()
        await storage.close()
        logger.info("polling_stopped")


def main() -> None:
    setup_logging()
    asyncio.run(run_polling())


if __name__ == "__main__":
    main()

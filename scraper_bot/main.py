"""FastAPI application entry point (webhook mode).

Lifespan wires the storage adapter, the Apify scraper, the aiogram bot and
dispatcher and APScheduler; routers expose the health check and the
Telegram webhook.
"""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI

from scraper_bot.bot.runner import build_runner
from scraper_bot.bot.setup import create_bot, create_dispatcher, set_bot_commands
from scraper_bot.core.config import settings
from scraper_bot.core.logging import setup_logging
from scraper_bot.db.factory import create_storage_adapter
from scraper_bot.routers import health, telegram
from scraper_bot.scheduler.jobs import shutdown_scheduler, start_scheduler
from scraper_bot.services.scraping import create_scraper

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: startup and shutdown hooks."""
    setup_logging()
    logger.info("application_starting", extra={"storage_backend": settings.STORAGE_BACKEND})

    storage = create_storage_adapter(settings)
    scraper = create_scraper(settings)
    application.state.storage = storage
    application.state.bot = None
    application.state.dispatcher = None

    bot = None
    if settings.TELEGRAM_BOT_TOKEN:
        bot = create_bot(settings)
        runner = build_runner(storage, scraper, settings)
        application.state.bot = bot
        application.state.dispatcher = create_dispatcher(runner, storage)
        await set_bot_commands(bot)
        if settings.WEBHOOK_URL:
            await bot.set_webhook(
                settings.WEBHOOK_URL,
                secret_token=settings.WEBHOOK_SECRET or None,
            )
            logger.info("webhook_registered", extra={"url": settings.WEBHOOK_URL})
    else:
        logger.warning("telegram_bot_disabled")

    start_scheduler(storage, scraper, settings)
    yield
    shutdown_scheduler()
    if bot is not None:
        await bot.session.close()
    await storage.close()
    logger.info("application_shutting_down")


app = FastAPI(
    title="Instagram Scraper Bot",
    description="Telegram bot for tracking Instagram competitors and hashtags",
    version="0.1.0",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Router Registration
# ---------------------------------------------------------------------------
app.include_router(health.router, tags=["Health"])
app.include_router(telegram.router, prefix="/telegram", tags=["Telegram"])

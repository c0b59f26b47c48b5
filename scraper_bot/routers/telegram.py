"""Telegram webhook endpoint (webhook mode).

Telegram sends the configured secret in ``X-Telegram-Bot-Api-Secret-Token``;
updates with a wrong or missing secret are rejected.  Accepted updates are
acknowledged at once and handled in a background task: a scraping
transition can outlast Telegram's webhook timeout, and an unanswered
webhook is delivered again.
"""

import logging
from typing import Any

from aiogram import Bot, Dispatcher
from aiogram.types import Update
from fastapi import APIRouter, BackgroundTasks, Header, HTTPException, Request

from scraper_bot.core.config import settings

logger = logging.getLogger(__name__)

router = APIRouter()


async def process_update(dispatcher: Dispatcher, bot: Bot, update: Update) -> None:
    """Feed one update to the dispatcher; failures are logged, never raised."""
    try:
        await dispatcher.feed_update(bot, update)
    except Exception:
        logger.exception("webhook_update_failed", extra={"update_id": update.update_id})


@router.post("/webhook", status_code=200)
async def telegram_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    x_telegram_bot_api_secret_token: str | None = Header(default=None),
) -> dict[str, Any]:
    if settings.WEBHOOK_SECRET and x_telegram_bot_api_secret_token != settings.WEBHOOK_SECRET:
        logger.warning("webhook_secret_mismatch")
        raise HTTPException(status_code=403, detail="Invalid secret token")

    bot = getattr(request.app.state, "bot", None)
    dispatcher = getattr(request.app.state, "dispatcher", None)
    if bot is None or dispatcher is None:
        raise HTTPException(status_code=503, detail="Telegram bot is not configured")

    update = Update.model_validate(await request.json(), context={"bot": bot})
    background_tasks.add_task(process_update, dispatcher, bot, update)
    return {"ok": True}

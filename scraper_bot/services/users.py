"""User registration on first contact."""

from __future__ import annotations

import logging

from scraper_bot.db.base import StorageAdapter
from scraper_bot.models.user import ChatUser, User

logger = logging.getLogger(__name__)


async def register_user(storage: StorageAdapter, chat_user: ChatUser) -> User:
    """Find the user by Telegram id or create it.  Opens its own connection."""
    async with storage.opened():
        user = await storage.find_user_by_telegram_id_or_create(chat_user)
    logger.info("user_registered", extra={"telegram_id": chat_user.telegram_id, "user_id": user.id})
    return user

"""Storage adapter selection by configuration."""

from __future__ import annotations

from scraper_bot.core.config import Settings
from scraper_bot.db.base import StorageAdapter
from scraper_bot.db.sqlite import SqliteAdapter
from scraper_bot.db.supabase import SupabaseAdapter


def create_storage_adapter(settings: Settings) -> StorageAdapter:
    """Build the adapter named by ``settings.STORAGE_BACKEND``.

    Construction never connects; missing credentials surface as
    ``StorageConfigError`` on the first ``initialize()``.
    """
    if settings.STORAGE_BACKEND == "supabase":
        return SupabaseAdapter(settings.SUPABASE_URL, settings.SUPABASE_KEY)
    return SqliteAdapter(settings.SQLITE_DB_PATH)

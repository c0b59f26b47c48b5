"""Application configuration via pydantic-settings.

Loads all settings from environment variables with sensible defaults.
A global `settings` singleton is available for import throughout the app.
Required credentials default to empty strings; the component that consumes
them (storage adapter, scraper, bot) fails fast when they are missing.
"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Telegram
    TELEGRAM_BOT_TOKEN: str = ""
    WEBHOOK_URL: str = ""
    WEBHOOK_SECRET: str = ""

    # Storage
    STORAGE_BACKEND: Literal["supabase", "sqlite"] = "sqlite"
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""
    SQLITE_DB_PATH: str = ".dev/sqlite.db"

    # Apify
    APIFY_TOKEN: str = ""
    APIFY_REELS_ACTOR_ID: str = "apify/instagram-scraper"

    # Scraping filters
    SCRAPING_MIN_VIEWS: int = 50000
    SCRAPING_MAX_AGE_DAYS: int = 14
    SCRAPING_LIMIT: int = 10

    # Scheduler (0 disables scheduled scraping)
    SCRAPING_INTERVAL_HOURS: int = 0
    SCRAPING_DRY_RUN: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"


settings = Settings()

"""Exception hierarchy for the scraper bot.

Not-found lookups are signalled with ``None`` and validation failures with
plain return values; these exceptions cover infrastructure failures only.
"""


class ScraperBotError(Exception):
    """Base class for all bot errors."""


class StorageError(ScraperBotError):
    """A storage backend failed to connect or to execute a query."""


class StorageConfigError(StorageError):
    """Storage connection settings are missing or malformed."""


class ScrapingError(ScraperBotError):
    """The scraping service failed (network, auth, rate limit, actor error)."""


class ScrapingConfigError(ScrapingError):
    """The scraping service token is missing."""


class BotConfigError(ScraperBotError):
    """The Telegram bot token is missing."""

"""Structured logging configuration.

Log calls use a snake_case event name as the message and pass their context
through ``extra={...}``.  ``ContextFormatter`` renders that context as
``key=value`` pairs after the event so it survives a plain-text sink.
"""

import logging
import sys

from scraper_bot.core.config import settings

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}

NOISY_LOGGERS = ("httpx", "httpcore", "aiogram.event", "apscheduler", "uvicorn.access")


class ContextFormatter(logging.Formatter):
    """Formatter that appends ``extra`` fields to the event name."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = {
            key: value for key, value in record.__dict__.items() if key not in _RECORD_ATTRS
        }
        if not context:
            return line
        pairs = " ".join(f"{key}={value!r}" for key, value in sorted(context.items()))
        head, sep, tail = line.partition("\n")
        return f"{head} | {pairs}{sep}{tail}"


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger for the bot process.

    The level defaults to ``settings.LOG_LEVEL``.  Repeated calls replace
    the handler instead of stacking a second one.
    """
    log_level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(
        ContextFormatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )
    )

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

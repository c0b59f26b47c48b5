"""Input validation helpers for free-text scene steps.

Failures are reported through return values (``False`` / ``None``) so the
scenes can re-prompt without touching storage.
"""

from __future__ import annotations

from scraper_bot.core.constants import (
    HASHTAG_MAX_LENGTH,
    HASHTAG_MIN_LENGTH,
    INSTAGRAM_URL_MARKER,
    PROJECT_NAME_MAX_LENGTH,
    PROJECT_NAME_MIN_LENGTH,
)


def is_valid_project_name(name: str | None) -> bool:
    """Return True when the stripped name is 3..100 characters long."""
    if not name:
        return False
    return PROJECT_NAME_MIN_LENGTH <= len(name.strip()) <= PROJECT_NAME_MAX_LENGTH


def extract_instagram_username(url: str | None) -> str | None:
    """Derive the account username from an Instagram profile URL.

    ``https://www.instagram.com/foo/?hl=ru`` -> ``"foo"``.  Returns ``None``
    for text that is not an Instagram URL or has no path segment.
    """
    if not url or INSTAGRAM_URL_MARKER not in url:
        return None
    path = url.strip().split("?", 1)[0].split("#", 1)[0].rstrip("/")
    username = path.rsplit("/", 1)[-1]
    if not username or INSTAGRAM_URL_MARKER.rstrip("/") in username:
        return None
    return username


def normalize_hashtag(text: str | None) -> str | None:
    """Return the storage form of a hashtag (no leading ``#``) or None."""
    if text is None:
        return None
    tag = text.strip()
    if tag.startswith("#"):
        tag = tag[1:]
    if not tag or any(ch.isspace() for ch in tag):
        return None
    if not HASHTAG_MIN_LENGTH <= len(tag) <= HASHTAG_MAX_LENGTH:
        return None
    return tag

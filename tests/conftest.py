"""Shared test fixtures.

Provides a mocked storage adapter (every contract method an ``AsyncMock``,
``opened()`` running the real bracket), a chat user and a FastAPI
``TestClient``.
"""

from collections.abc import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from scraper_bot.db.base import StorageAdapter
from scraper_bot.models.user import ChatUser

ADAPTER_METHODS = (
    "initialize",
    "close",
    "get_user_by_telegram_id",
    "create_user",
    "find_user_by_telegram_id_or_create",
    "get_projects_by_user_id",
    "create_project",
    "get_project_by_id",
    "get_active_projects",
    "get_competitor_accounts",
    "add_competitor_account",
    "delete_competitor_account",
    "get_hashtags_by_project_id",
    "add_hashtag",
    "remove_hashtag",
    "save_reels",
    "get_reels",
    "update_reel_processing_status",
    "log_parsing_run",
    "get_parsing_run_logs",
)


@pytest.fixture()
def storage() -> MagicMock:
    """Mock adapter; ``opened()`` still initializes and closes it."""
    mock = MagicMock(spec=StorageAdapter)
    for name in ADAPTER_METHODS:
        setattr(mock, name, AsyncMock())
    mock._open_count = 0
    mock._open_lock = None
    mock.opened = lambda: StorageAdapter.opened(mock)
    mock.get_projects_by_user_id.return_value = []
    mock.get_active_projects.return_value = []
    mock.get_competitor_accounts.return_value = []
    mock.get_hashtags_by_project_id.return_value = []
    mock.get_reels.return_value = []
    mock.get_parsing_run_logs.return_value = []
    return mock


@pytest.fixture()
def chat_user() -> ChatUser:
    return ChatUser(telegram_id=123456789, username="tester", first_name="Test")


@pytest.fixture()
def test_client() -> Generator[TestClient, None, None]:
    """FastAPI TestClient; the lifespan is not run."""
    from scraper_bot.main import app

    yield TestClient(app)

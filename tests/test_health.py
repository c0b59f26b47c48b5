"""Unit tests for the /health and Telegram webhook endpoints."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from scraper_bot.core.exceptions import StorageError


@pytest.fixture()
def app_state(monkeypatch: pytest.MonkeyPatch):
    from scraper_bot.main import app

    def _set(**values) -> None:
        for name, value in values.items():
            monkeypatch.setattr(app.state, name, value, raising=False)

    return _set


class TestHealthEndpoint:
    """GET /health returns the storage and scheduler status."""

    @patch("scraper_bot.routers.health.is_scheduler_running", return_value=True)
    def test_health_connected(
        self, mock_is_running: MagicMock, test_client: TestClient, storage: MagicMock, app_state
    ) -> None:
        """Given storage opens, /health returns database=connected."""
        app_state(storage=storage)

        response = test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["database"] == "connected"
        assert body["scheduler"] == "running"
        assert body["pipeline_run_id"] is None
        storage.close.assert_awaited_once()

    def test_health_disconnected(
        self, test_client: TestClient, storage: MagicMock, app_state
    ) -> None:
        """Given storage is unreachable, /health returns 503 with database=disconnected."""
        storage.initialize.side_effect = StorageError("down")
        app_state(storage=storage)

        response = test_client.get("/health")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "degraded"
        assert body["database"] == "disconnected"

    def test_health_without_storage(self, test_client: TestClient, app_state) -> None:
        app_state(storage=None)

        assert test_client.get("/health").status_code == 503


class TestTelegramWebhook:
    """POST /telegram/webhook feeds updates to the dispatcher."""

    @patch("scraper_bot.routers.telegram.settings")
    def test_wrong_secret(self, mock_settings: MagicMock, test_client: TestClient) -> None:
        mock_settings.WEBHOOK_SECRET = "s3cret"

        response = test_client.post(
            "/telegram/webhook",
            json={"update_id": 1},
            headers={"X-Telegram-Bot-Api-Secret-Token": "wrong"},
        )

        assert response.status_code == 403

    @patch("scraper_bot.routers.telegram.settings")
    def test_bot_not_configured(
        self, mock_settings: MagicMock, test_client: TestClient, app_state
    ) -> None:
        mock_settings.WEBHOOK_SECRET = ""
        app_state(bot=None, dispatcher=None)

        response = test_client.post("/telegram/webhook", json={"update_id": 1})

        assert response.status_code == 503

    @patch("scraper_bot.routers.telegram.settings")
    def test_update_fed_to_dispatcher(
        self, mock_settings: MagicMock, test_client: TestClient, app_state
    ) -> None:
        """Given the right secret, the update reaches the dispatcher."""
        mock_settings.WEBHOOK_SECRET = "s3cret"
        bot = MagicMock()
        dispatcher = MagicMock()
        dispatcher.feed_update = AsyncMock()
        app_state(bot=bot, dispatcher=dispatcher)

        response = test_client.post(
            "/telegram/webhook",
            json={"update_id": 42},
            headers={"X-Telegram-Bot-Api-Secret-Token": "s3cret"},
        )

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        fed_bot, update = dispatcher.feed_update.await_args.args
        assert fed_bot is bot
        assert update.update_id == 42

    @patch("scraper_bot.routers.telegram.process_update")
    @patch("scraper_bot.routers.telegram.settings")
    def test_update_handled_in_background(
        self,
        mock_settings: MagicMock,
        mock_process: MagicMock,
        test_client: TestClient,
        app_state,
    ) -> None:
        """Given an accepted update, the handler schedules it instead of running it inline."""
        mock_settings.WEBHOOK_SECRET = ""
        bot = MagicMock()
        dispatcher = MagicMock()
        dispatcher.feed_update = AsyncMock()
        app_state(bot=bot, dispatcher=dispatcher)

        response = test_client.post("/telegram/webhook", json={"update_id": 43})

        assert response.status_code == 200
        scheduled_dispatcher, scheduled_bot, update = mock_process.call_args.args
        assert scheduled_dispatcher is dispatcher
        assert scheduled_bot is bot
        assert update.update_id == 43
        dispatcher.feed_update.assert_not_awaited()

    @patch("scraper_bot.routers.telegram.settings")
    def test_handler_failure_still_acknowledged(
        self, mock_settings: MagicMock, test_client: TestClient, app_state
    ) -> None:
        """Given the dispatcher fails, Telegram still gets 200 so it does not redeliver."""
        mock_settings.WEBHOOK_SECRET = ""
        dispatcher = MagicMock()
        dispatcher.feed_update = AsyncMock(side_effect=RuntimeError("scene crashed"))
        app_state(bot=MagicMock(), dispatcher=dispatcher)

        response = test_client.post("/telegram/webhook", json={"update_id": 44})

        assert response.status_code == 200
        dispatcher.feed_update.assert_awaited_once()


class TestProcessUpdate:
    """Background processing of one webhook update."""

    @pytest.mark.asyncio
    async def test_failure_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        from aiogram.types import Update

        from scraper_bot.routers.telegram import process_update

        dispatcher = MagicMock()
        dispatcher.feed_update = AsyncMock(side_effect=RuntimeError("scene crashed"))

        await process_update(dispatcher, MagicMock(), Update(update_id=5))

        assert "webhook_update_failed" in caplog.text

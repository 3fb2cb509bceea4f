"""
Unit Test Fixtures.

Fixtures for unit tests. The Bot API is replaced by an in-process
httpx.MockTransport, so no test touches the network.
"""

import json
from collections.abc import AsyncGenerator
from pathlib import Path

import httpx
import pytest
import pytest_asyncio

from relay.core.config_schema import RelaySettings
from relay.telegram.gateway import TelegramGateway

TEST_TOKEN = "123456:TEST-TOKEN"
TEST_BASE_URL = "https://api.telegram.test/bot"


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def public_key_file(tmp_path: Path) -> Path:
    """A certificate file for setWebhook tests."""
    path = tmp_path / "public.pem"
    path.write_bytes(b"-----BEGIN CERTIFICATE-----\nMIIB\n-----END CERTIFICATE-----\n")
    return path


@pytest.fixture
def relay_settings(public_key_file: Path) -> RelaySettings:
    """Resolved settings pointing at a fake Bot API."""
    return RelaySettings(
        nats_url="nats://localhost:4222",
        nats_subject="telegram.notifications",
        telegram_url=TEST_BASE_URL,
        telegram_token=TEST_TOKEN,
        webhook_url="https://relay.test/telegram/webhook",
        public_key_path=str(public_key_file),
        inline_result_url_template="https://t.me/anime_notify_bot?start={}",
        port=8080,
    )


# =============================================================================
# Bot API Fixtures
# =============================================================================


class BotApiStub:
    """
    Fake Bot API recording every request.

    Usage:
        bot_api.statuses["sendMessage"] = 400
        bot_api.failures["answerCallbackQuery"] = httpx.ConnectError("refused")
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.statuses: dict[str, int] = {}
        self.failures: dict[str, Exception] = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method = request.url.path.rsplit("/", 1)[-1]
        if method in self.failures:
            raise self.failures[method]
        status = self.statuses.get(method, 200)
        return httpx.Response(status, json={"ok": status == 200, "result": True})

    def methods(self) -> list[str]:
        """Bot API method names in request order."""
        return [r.url.path.rsplit("/", 1)[-1] for r in self.requests]

    def json_body(self, method: str) -> dict:
        """Decoded JSON body of the first request to ``method``."""
        for request in self.requests:
            if request.url.path.endswith(f"/{method}"):
                return json.loads(request.content)
        raise AssertionError(f"No request to {method}")


@pytest.fixture
def bot_api() -> BotApiStub:
    return BotApiStub()


@pytest_asyncio.fixture
async def http_client(bot_api: BotApiStub) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Async HTTP client wired to the fake Bot API."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(bot_api)) as client:
        yield client


@pytest.fixture
def gateway(http_client: httpx.AsyncClient) -> TelegramGateway:
    return TelegramGateway(http_client, TEST_BASE_URL, TEST_TOKEN)


# =============================================================================
# Dispatcher Fixtures
# =============================================================================


@pytest.fixture
def collected_errors() -> list:
    """Error sink target; the dispatcher fixture appends every reported error here."""
    return []


@pytest.fixture
def dispatcher(gateway: TelegramGateway, relay_settings: RelaySettings, collected_errors: list):
    from relay.telegram.dispatcher import NotificationDispatcher

    return NotificationDispatcher(gateway, relay_settings, error_sink=collected_errors.append)

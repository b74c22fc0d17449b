# =============================================================================
# File: tests/conftest.py
# Description: Shared fixtures
# =============================================================================

import httpx
import pytest

from tests.fakes.fake_platform import FakeAuth, FakeHandleFactory
from tradebot.bot import Bot
from tradebot.config.bot_config import BotSettings, reset_bot_settings


def _not_found(request: httpx.Request) -> httpx.Response:
    return httpx.Response(404, json={"success": 2})


@pytest.fixture(autouse=True)
def _reset_settings():
    reset_bot_settings()
    yield
    reset_bot_settings()


@pytest.fixture
def settings() -> BotSettings:
    return BotSettings.from_mapping({})


@pytest.fixture
def handle_factory() -> FakeHandleFactory:
    return FakeHandleFactory()


@pytest.fixture
def auth() -> FakeAuth:
    return FakeAuth()


@pytest.fixture
def http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(_not_found))


@pytest.fixture
def bot(settings, handle_factory, auth, http_client) -> Bot:
    return Bot("alice", "secret", settings=settings, handle_factory=handle_factory,
               auth=auth, http_client=http_client)

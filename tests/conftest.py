# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# Sets the required mail settings before the app is imported and provides
# fixtures for settings, a mocked mail dispatcher and a test client.
# =============================================================================

import os

os.environ.setdefault("EMAIL_USER", "portfolio@vyzx.live")
os.environ.setdefault("EMAIL_PASS", "test-password")
os.environ.setdefault("EMAIL_FROM", "VYZ Portfolio <portfolio@vyzx.live>")
os.environ.setdefault("EMAIL_TO", "owner@vyzx.live")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SMTP_VERIFY_ON_STARTUP", "false")

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_mail_dispatcher
from app.core.config import Settings, get_settings
from app.core.limiter import limiter
from app.main import create_app
from app.schemas.contactSchema import DispatchOutcome
from app.services.MailDispatcher import MailDispatcher


# =============================================================================
# Fakes
# =============================================================================

class FakePool:
    """Stands in for SmtpConnectionPool; records messages and can fail or stall per recipient."""

    hostname = "smtp.test"
    port = 465

    def __init__(self, delays=None, errors=None, verify_errors=None):
        self.delays = delays or {}
        self.errors = errors or {}
        self.verify_errors = list(verify_errors or [])
        self.sent = []
        self.verify_calls = 0

    async def send_message(self, message):
        recipient = message["To"]
        await asyncio.sleep(self.delays.get(recipient, 0))
        if recipient in self.errors:
            raise self.errors[recipient]
        self.sent.append(message)
        return "250 OK"

    async def verify(self):
        self.verify_calls += 1
        if self.verify_errors:
            raise self.verify_errors.pop(0)


class FakeSMTP:
    """Minimal aiosmtplib.SMTP double used by the pool tests."""

    def __init__(self, login_error=None, send_delay=0.0, tracker=None):
        self.login_error = login_error
        self.send_delay = send_delay
        self.tracker = tracker
        self.is_connected = False
        self.sent = []
        self.quit_called = False

    async def connect(self, **kwargs):
        self.is_connected = True

    async def login(self, username, password):
        if self.login_error:
            raise self.login_error

    async def send_message(self, message):
        if self.tracker is not None:
            self.tracker["active"] += 1
            self.tracker["peak"] = max(self.tracker["peak"], self.tracker["active"])
        try:
            await asyncio.sleep(self.send_delay)
            self.sent.append(message)
        finally:
            if self.tracker is not None:
                self.tracker["active"] -= 1
        return {}, "250 2.0.0 Ok: queued"

    async def quit(self):
        self.quit_called = True
        self.is_connected = False

    def close(self):
        self.is_connected = False


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def reset_global_state():
    """Fresh settings cache and rate-limit counters for every test."""
    get_settings.cache_clear()
    limiter.reset()
    yield
    get_settings.cache_clear()
    limiter.reset()


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def valid_form():
    return {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "subject": "Website redesign",
        "message": "I would like to talk about a new portfolio site.",
    }


@pytest.fixture
def fake_dispatcher():
    dispatcher = MagicMock(spec=MailDispatcher)
    dispatcher.send_contact_pair = AsyncMock(
        return_value=DispatchOutcome.delivered("<owner-1@vyzx.live>", "<user-1@vyzx.live>")
    )
    dispatcher.verify = AsyncMock(return_value=None)
    return dispatcher


@pytest.fixture
def make_client(fake_dispatcher):
    """Factory building a TestClient for given settings, with the dispatcher mocked."""
    clients = []

    def _make(app_settings=None, raise_server_exceptions=True, **overrides):
        app_settings = app_settings or Settings(_env_file=None, **overrides)
        app = create_app(app_settings)
        app.dependency_overrides[get_mail_dispatcher] = lambda: fake_dispatcher
        client = TestClient(app, raise_server_exceptions=raise_server_exceptions)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client):
    return make_client()

"""Shared fixtures for the session store test suite."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from starlette.requests import Request

from session_storer.config import Settings, override_settings
from session_storer.main import create_app
from session_storer.session import InMemoryBackend, SessionStore

SECRET = "test-secret-key-for-sessions"


class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(1_000_000.0)


@pytest.fixture
def backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def make_store(backend, clock):
    """Factory for stores sharing the test backend, clock and secret."""

    def _make(**kwargs) -> SessionStore:
        return SessionStore(secret=SECRET, backend=backend, clock=clock, **kwargs)

    return _make


@pytest.fixture
def store(make_store) -> SessionStore:
    return make_store()


@pytest.fixture
def make_request():
    """Factory for bare requests, optionally carrying a session cookie."""

    def _make(store: SessionStore | None = None, token: str | None = None, cookie: str | None = None) -> Request:
        headers = []
        if token is not None:
            cookie = f"{store.cookie_name}={store.issuer.encode(token)}"
        if cookie is not None:
            headers.append((b"cookie", cookie.encode("latin-1")))
        return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})

    return _make


@pytest.fixture
def session_request(store, make_request) -> Request:
    """A request that already passed through the session filter."""
    return make_request(store, token=store.issue_token())


# ── Test Settings ─────────────────────────────────────────────────────────

@pytest.fixture
def test_settings() -> Settings:
    return Settings(session_secret=SECRET)


@pytest.fixture(autouse=True)
def _reset_settings():
    yield
    override_settings(None)


# ── App & Client ──────────────────────────────────────────────────────────

@pytest.fixture
def app(store):
    return create_app(store=store)


@pytest.fixture
def client(app) -> TestClient:
    """TestClient with cookie persistence."""
    return TestClient(app, cookies={})

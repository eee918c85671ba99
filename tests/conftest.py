"""Test configuration and fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any
from unittest.mock import Mock

import pytest
import requests

from ett_ticket_bridge.bridge.ett.client import EttClient
from ett_ticket_bridge.bridge.session.storage import MemoryStorage
from ett_ticket_bridge.bridge.session.store import SessionStore

API_URL = "https://ett.example.com/api"
FIXED_NOW = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)

ResponseFactory = Callable[..., requests.Response]


def _build_response(
    status_code: int = 200, payload: Any = None, *, text: str | None = None
) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status_code
    if text is not None:
        resp._content = text.encode("utf-8")
    else:
        resp._content = json.dumps(payload).encode("utf-8")
    resp.headers["Content-Type"] = "application/json"
    return resp


@pytest.fixture
def make_response() -> ResponseFactory:
    """Build a real `requests.Response` with a JSON (or raw text) body."""
    return _build_response


@pytest.fixture
def storage() -> MemoryStorage:
    """Provide an empty in-memory key-value storage."""
    return MemoryStorage()


@pytest.fixture
def session_store(storage: MemoryStorage) -> SessionStore:
    """Provide a session store with no active session."""
    store = SessionStore(storage, default_api_url=API_URL, clock=lambda: FIXED_NOW)
    store.init()
    return store


@pytest.fixture
def authed_store(session_store: SessionStore) -> SessionStore:
    """Provide a session store configured with a token and user identity."""
    session_store.configure_token(
        api_url=API_URL, access_token="secret-token", user_id=7, user_name="alice"
    )
    return session_store


@pytest.fixture
def http() -> Mock:
    """Provide a mocked `requests.Session`; no network calls are made."""
    mock = Mock(spec=requests.Session)
    mock.headers = {}
    return mock


@pytest.fixture
def client(authed_store: SessionStore, http: Mock) -> EttClient:
    """Provide an authenticated client backed by the mocked HTTP session."""
    return EttClient(session_store=authed_store, http=http, clock=lambda: FIXED_NOW)

"""Unit tests for settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from ett_ticket_bridge.bridge.config import BridgeSettings
from ett_ticket_bridge.bridge.session.storage import JsonFileStorage, NullStorage

_ENV_VARS = (
    "ETT_API_URL",
    "ETT_ACCESS_TOKEN",
    "ETT_STATE_PATH",
    "ETT_PERSIST_SESSION",
    "ETT_REQUEST_TIMEOUT",
    "LOG_LEVEL",
)


@pytest.fixture
def clean_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_settings_defaults(clean_env: Path) -> None:
    settings = BridgeSettings()

    assert settings.api_url == ""
    assert settings.access_token == ""
    assert settings.state_path == Path("ett_state")
    assert settings.credentials_file == Path("ett_state") / "credentials.json"
    assert settings.persist_session is True
    assert settings.request_timeout is None
    assert settings.log_level == "INFO"


def test_settings_loads_from_dotenv(clean_env: Path) -> None:
    (clean_env / ".env").write_text(
        "\n".join(
            [
                "ETT_API_URL=https://ett.example.com/api/",
                "ETT_ACCESS_TOKEN=from-dotenv",
                "ETT_REQUEST_TIMEOUT=2.5",
                "LOG_LEVEL=DEBUG",
                "",
            ]
        ),
        encoding="utf-8",
    )

    settings = BridgeSettings()

    assert settings.api_url == "https://ett.example.com/api"
    assert settings.access_token == "from-dotenv"
    assert settings.request_timeout == 2.5
    assert settings.log_level == "DEBUG"


def test_environment_overrides_dotenv(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (clean_env / ".env").write_text("ETT_API_URL=https://dotenv.example.com\n", encoding="utf-8")
    monkeypatch.setenv("ETT_API_URL", "  https://env.example.com  ")

    assert BridgeSettings().api_url == "https://env.example.com"


def test_non_positive_timeout_is_rejected(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ETT_REQUEST_TIMEOUT", "0")

    with pytest.raises(ValidationError):
        BridgeSettings()


def test_build_storage_uses_credentials_file(
    clean_env: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("ETT_STATE_PATH", str(clean_env / "state"))

    storage = BridgeSettings().build_storage()

    assert isinstance(storage, JsonFileStorage)
    assert storage.path == clean_env / "state" / "credentials.json"


def test_build_storage_without_persistence(
    clean_env: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("ETT_PERSIST_SESSION", "false")

    assert isinstance(BridgeSettings().build_storage(), NullStorage)

"""Configuration for the ETT ticket bridge.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

Nothing is required at startup. The API URL and credential are checked when a
call actually needs them, so `parse-summary` works without any tracker access.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ett_ticket_bridge.bridge.session.storage import JsonFileStorage, KeyValueStorage, NullStorage


class BridgeSettings(BaseSettings):
    """Settings for the ETT bridge.

    Environment variables:
    - ETT_API_URL          (optional) default tracker base URL, used for login
    - ETT_ACCESS_TOKEN     (optional) pre-issued token for `configure`
    - ETT_STATE_PATH       (optional) directory for the credential file
    - ETT_PERSIST_SESSION  (optional) set to false for headless runs
    - ETT_REQUEST_TIMEOUT  (optional) request timeout in seconds
    - LOG_LEVEL            (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `BridgeSettings(_env_file=path_to_env)`.
    """

    api_url: str = Field(
        default="",
        validation_alias="ETT_API_URL",
        description="ETT issue tracker API base URL",
    )
    access_token: str = Field(
        default="",
        validation_alias="ETT_ACCESS_TOKEN",
        description="Long-lived access token used by `configure` when none is passed",
    )

    state_path: Path = Field(
        default=Path("ett_state"),
        validation_alias="ETT_STATE_PATH",
        description="Directory where the session record is persisted",
    )
    persist_session: bool = Field(
        default=True,
        validation_alias="ETT_PERSIST_SESSION",
        description="Persist the session between runs; disable for non-interactive use",
    )
    request_timeout: float | None = Field(
        default=None,
        gt=0,
        validation_alias="ETT_REQUEST_TIMEOUT",
        description="Per-request timeout in seconds; unset uses the transport default",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("api_url")
    @classmethod
    def _normalize_api_url(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @property
    def credentials_file(self) -> Path:
        """Path of the JSON key-value file holding the session record."""

        return self.state_path / "credentials.json"

    def build_storage(self) -> KeyValueStorage:
        if not self.persist_session:
            return NullStorage()
        return JsonFileStorage(self.credentials_file)

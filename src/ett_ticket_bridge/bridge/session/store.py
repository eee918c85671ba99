"""Session/config record for the ETT tracker.

Exactly one record is active at a time. It is either the result of a
username/password login (token + identity + optional expiry) or a user-supplied
API URL + access token pair. Both shapes share :class:`SessionRecord`.

The raw token never leaves this module except through
:meth:`SessionStore.access_token`, which only the HTTP client calls. Everything
else sees the redacted :class:`SessionState`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from pydantic import BaseModel, Field, SecretStr, ValidationError, field_serializer, field_validator

from ett_ticket_bridge.bridge.session.storage import KeyValueStorage

logger = logging.getLogger(__name__)

SESSION_STORAGE_KEY = "ett_auth"


def utcnow() -> datetime:
    return datetime.now(UTC)


class SessionRecord(BaseModel):
    """The persisted credential record."""

    api_url: str = Field(default="")
    access_token: SecretStr = Field(default=SecretStr(""))
    refresh_token: SecretStr | None = Field(default=None)
    user_id: int | None = Field(default=None)
    user_name: str | None = Field(default=None)
    expires_at: datetime | None = Field(default=None)

    @field_validator("api_url")
    @classmethod
    def _strip_api_url(cls, value: str) -> str:
        return value.strip()

    @field_validator("expires_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @field_serializer("access_token", "refresh_token", when_used="json")
    def _reveal_for_storage(self, value: SecretStr | None) -> str | None:
        # JSON dumps only happen when persisting; repr/str stay masked.
        return value.get_secret_value() if value is not None else None

    @property
    def has_token(self) -> bool:
        return bool(self.access_token.get_secret_value().strip())


class SessionState(BaseModel):
    """Redacted view of the active session. Never carries the credential."""

    is_authenticated: bool
    is_configured: bool
    api_url: str
    has_api_url: bool
    has_token: bool
    user_id: int | None = None
    user_name: str | None = None
    expires_at: datetime | None = None


class SessionStore:
    """Owns the single active :class:`SessionRecord` and its persisted copy."""

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        key: str = SESSION_STORAGE_KEY,
        default_api_url: str = "",
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._storage = storage
        self._key = key
        self._default_api_url = default_api_url.strip()
        self._clock = clock
        self._record: SessionRecord | None = None

    def init(self) -> SessionState:
        """Load the persisted record, if any.

        Missing or unreadable data means "no session"; it is never an error.
        """

        raw = self._storage.get(self._key)
        if raw is None:
            logger.debug("No stored session found")
            self._record = None
            return self.get_state()

        try:
            self._record = SessionRecord.model_validate_json(raw)
        except ValidationError:
            logger.warning("Stored session is unreadable; ignoring it", extra={"key": self._key})
            self._record = None
            return self.get_state()

        logger.info(
            "Session loaded",
            extra={"user_id": self._record.user_id, "api_url": self._record.api_url},
        )
        return self.get_state()

    def dispose(self) -> None:
        """Forget the in-memory record. Persisted state is left untouched."""

        self._record = None

    def configure(self, record: SessionRecord) -> None:
        """Replace the active record and persist it."""

        self._record = record
        self._storage.set(self._key, record.model_dump_json())
        logger.info(
            "Session configured",
            extra={"user_id": record.user_id, "api_url": record.api_url},
        )

    def configure_token(
        self,
        *,
        api_url: str,
        access_token: str,
        user_id: int | None = None,
        user_name: str | None = None,
    ) -> None:
        """Configure from a user-supplied API URL and long-lived access token."""

        self.configure(
            SessionRecord(
                api_url=api_url,
                access_token=SecretStr(access_token),
                user_id=user_id,
                user_name=user_name,
            )
        )

    def clear(self) -> None:
        """Remove the active record and its persisted copy. Idempotent."""

        had_record = self._record is not None
        self._record = None
        self._storage.remove(self._key)
        if had_record:
            logger.info("Session cleared")

    logout = clear

    @property
    def api_url(self) -> str:
        if self._record is not None:
            return self._record.api_url
        return self._default_api_url

    def has_api_url(self) -> bool:
        return bool(self.api_url)

    def is_configured(self) -> bool:
        record = self._record
        return record is not None and bool(record.api_url) and record.has_token

    def is_expired(self) -> bool:
        record = self._record
        if record is None or record.expires_at is None:
            return False
        return record.expires_at <= self._clock()

    def is_authenticated(self) -> bool:
        return self.is_configured() and not self.is_expired()

    def access_token(self) -> str | None:
        """Raw bearer token for the HTTP client; ``None`` when absent."""

        if self._record is None or not self._record.has_token:
            return None
        return self._record.access_token.get_secret_value()

    def get_state(self) -> SessionState:
        record = self._record
        return SessionState(
            is_authenticated=self.is_authenticated(),
            is_configured=self.is_configured(),
            api_url=self.api_url,
            has_api_url=self.has_api_url(),
            has_token=record is not None and record.has_token,
            user_id=record.user_id if record is not None else None,
            user_name=record.user_name if record is not None else None,
            expires_at=record.expires_at if record is not None else None,
        )

    get_config = get_state

"""Error taxonomy for ETT API calls.

Every failure the bridge can report falls into one of three kinds:

- configuration: base URL or credential missing (raised before any network call)
- authentication: credential rejected, missing or expired
- remote: non-2xx response or transport failure

The HTTP wrapper in :mod:`ett_ticket_bridge.bridge.ett.client` returns a
:class:`CallResult` rather than raising; public client methods unwrap it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    AUTHENTICATION = "authentication"
    REMOTE = "remote"


class EttError(Exception):
    """Base class for all ETT bridge errors."""

    kind: ErrorKind = ErrorKind.REMOTE

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(EttError):
    """API URL or access token missing."""

    kind = ErrorKind.CONFIGURATION


class AuthenticationError(EttError):
    """Login rejected, or the stored credential expired or was revoked."""

    kind = ErrorKind.AUTHENTICATION


class RemoteError(EttError):
    """The tracker answered with an error, or could not be reached."""

    kind = ErrorKind.REMOTE

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


_ERRORS_BY_KIND: dict[ErrorKind, type[EttError]] = {
    ErrorKind.CONFIGURATION: ConfigurationError,
    ErrorKind.AUTHENTICATION: AuthenticationError,
    ErrorKind.REMOTE: RemoteError,
}


@dataclass(frozen=True, slots=True)
class CallResult(Generic[T]):
    """Outcome of a single HTTP call: either a value or a classified failure."""

    ok: bool
    value: T | None = None
    kind: ErrorKind | None = None
    message: str = ""
    status_code: int | None = None

    @classmethod
    def success(cls, value: T) -> CallResult[T]:
        return cls(ok=True, value=value)

    @classmethod
    def failure(
        cls, kind: ErrorKind, message: str, *, status_code: int | None = None
    ) -> CallResult[T]:
        return cls(ok=False, kind=kind, message=message, status_code=status_code)

    def to_error(self) -> EttError:
        if self.ok or self.kind is None:
            raise ValueError("Successful results carry no error")
        if self.kind is ErrorKind.REMOTE:
            return RemoteError(self.message, status_code=self.status_code)
        return _ERRORS_BY_KIND[self.kind](self.message)

    def unwrap(self) -> T:
        """Return the value, or raise the exception matching the failure kind."""

        if not self.ok:
            raise self.to_error()
        return self.value  # type: ignore[return-value]


@dataclass(frozen=True, slots=True)
class ConnectionResult:
    """Report-style outcome for calls that never raise (login, connection test)."""

    success: bool
    message: str

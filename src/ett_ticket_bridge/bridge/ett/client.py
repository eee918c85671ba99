"""HTTP client for the ETT issue tracker API.

All authorized requests go through :meth:`EttClient._send`, which returns a
:class:`~ett_ticket_bridge.bridge.ett.errors.CallResult`. Public methods either
unwrap it (raising the classified error) or report it as a
:class:`~ett_ticket_bridge.bridge.ett.errors.ConnectionResult`.

The credential is read from the injected :class:`SessionStore` on every call; the
client keeps no copy of it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta
from typing import Any, TypeVar

import requests
from pydantic import BaseModel, SecretStr, ValidationError

from ett_ticket_bridge.bridge.ett.errors import (
    CallResult,
    ConnectionResult,
    ErrorKind,
    EttError,
    RemoteError,
)
from ett_ticket_bridge.bridge.ett.models import (
    Board,
    CreateIssueRequest,
    Issue,
    Label,
    TeamMember,
)
from ett_ticket_bridge.bridge.session.store import SessionRecord, SessionStore, utcnow

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

MISSING_API_URL_MESSAGE = "API URL not configured. Set ETT_API_URL or run 'configure'."
NOT_AUTHENTICATED_MESSAGE = "Not authenticated. Please login first."
SESSION_EXPIRED_MESSAGE = "Session expired. Please login again."


def _coerce_user_id(value: Any) -> int | None:
    # Some deployments send ids as numeric strings.
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


class EttClient:
    """Small wrapper around the tracker's REST endpoints."""

    def __init__(
        self,
        *,
        session_store: SessionStore,
        http: requests.Session | None = None,
        timeout: float | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = session_store
        self._http = http or requests.Session()
        self._http.headers.update(
            {
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": "ett-ticket-bridge",
            }
        )
        # None defers to the transport default.
        self._timeout = timeout
        self._clock = clock

    @property
    def session_store(self) -> SessionStore:
        return self._store

    @staticmethod
    def _url(base_url: str, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        return f"{base_url.rstrip('/')}{path}"

    @staticmethod
    def _error_message(resp: requests.Response, fallback: str) -> str:
        try:
            payload = resp.json()
        except ValueError:
            payload = None
        message = payload.get("message") if isinstance(payload, dict) else None
        if not isinstance(message, str) or not message.strip():
            return fallback
        return message

    def _authorize(self) -> CallResult[dict[str, str]]:
        """Check URL and credential. No network call happens on failure."""

        if not self._store.api_url:
            return CallResult.failure(ErrorKind.CONFIGURATION, MISSING_API_URL_MESSAGE)

        token = self._store.access_token()
        if token is None:
            return CallResult.failure(ErrorKind.CONFIGURATION, NOT_AUTHENTICATED_MESSAGE)

        if self._store.is_expired():
            logger.info("Stored session has expired; clearing it")
            self._store.clear()
            return CallResult.failure(ErrorKind.AUTHENTICATION, SESSION_EXPIRED_MESSAGE)

        return CallResult.success({"Authorization": f"Bearer {token}"})

    def _send(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
    ) -> CallResult[Any]:
        """Issue one authorized request and classify the outcome."""

        auth = self._authorize()
        if not auth.ok:
            return CallResult.failure(auth.kind or ErrorKind.CONFIGURATION, auth.message)

        url = self._url(self._store.api_url, path)
        logger.debug("ETT request", extra={"method": method, "path": path})
        try:
            resp = self._http.request(
                method, url, json=json, headers=auth.value, timeout=self._timeout
            )
        except requests.RequestException as e:
            logger.warning("ETT request failed", extra={"path": path, "error": str(e)})
            return CallResult.failure(ErrorKind.REMOTE, str(e) or "Connection failed")

        if resp.status_code == 401:
            # The token is known-bad; the next call starts logged out.
            self._store.clear()
            return CallResult.failure(
                ErrorKind.AUTHENTICATION, SESSION_EXPIRED_MESSAGE, status_code=401
            )

        if not resp.ok:
            message = self._error_message(resp, f"ETT API error: {resp.status_code}")
            logger.warning(
                "ETT API returned an error",
                extra={"path": path, "status_code": resp.status_code, "error": message},
            )
            return CallResult.failure(ErrorKind.REMOTE, message, status_code=resp.status_code)

        try:
            payload = resp.json()
        except ValueError:
            return CallResult.failure(
                ErrorKind.REMOTE,
                "ETT API returned a non-JSON response",
                status_code=resp.status_code,
            )
        return CallResult.success(payload)

    def _request_data(self, method: str, path: str, *, json: dict[str, Any] | None = None) -> Any:
        """Send a request and return the ``data`` field of the ``{success, data}`` envelope."""

        payload = self._send(method, path, json=json).unwrap()
        if not isinstance(payload, dict) or payload.get("success") is not True:
            raise RemoteError(f"Unexpected response from ETT API for {path}")
        if "data" not in payload:
            raise RemoteError(f"Unexpected response from ETT API for {path}: missing data")
        return payload["data"]

    @staticmethod
    def _parse_list(model: type[ModelT], data: Any, *, path: str) -> list[ModelT]:
        if not isinstance(data, list):
            raise RemoteError(f"Unexpected response from ETT API for {path}: data is not a list")
        try:
            return [model.model_validate(item) for item in data]
        except ValidationError as e:
            raise RemoteError(f"Invalid {model.__name__} in response for {path}") from e

    def login(
        self, username: str, password: str, *, api_url: str | None = None
    ) -> ConnectionResult:
        """Exchange username/password for a session. Never raises.

        ``api_url`` overrides the configured base URL. On success the new session
        replaces any existing one.
        """

        api_url = (api_url or self._store.api_url).strip().rstrip("/")
        if not api_url:
            return ConnectionResult(success=False, message=MISSING_API_URL_MESSAGE)

        try:
            resp = self._http.post(
                self._url(api_url, "/login"),
                json={"username": username, "password": password},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            return ConnectionResult(success=False, message=str(e) or "Connection failed")

        if not resp.ok:
            logger.info("Login rejected", extra={"status_code": resp.status_code})
            return ConnectionResult(
                success=False, message=self._error_message(resp, "Invalid credentials")
            )

        try:
            data = resp.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            return ConnectionResult(success=False, message="Login failed: unexpected response")

        access_token = data.get("access_token")
        if not isinstance(access_token, str) or not access_token.strip():
            return ConnectionResult(
                success=False, message="Login failed: no access token in response"
            )

        user_id = _coerce_user_id(data.get("user_id") or data.get("id"))
        user_name = data.get("username") or data.get("name") or username
        refresh_token = data.get("refresh_token")

        expires_at = None
        expires_in = data.get("expires_in")
        if isinstance(expires_in, int | float) and expires_in > 0:
            expires_at = self._clock() + timedelta(seconds=expires_in)

        self._store.configure(
            SessionRecord(
                api_url=api_url,
                access_token=SecretStr(access_token),
                refresh_token=SecretStr(refresh_token) if isinstance(refresh_token, str) else None,
                user_id=user_id,
                user_name=str(user_name),
                expires_at=expires_at,
            )
        )
        logger.info("Logged in", extra={"user_id": user_id})
        return ConnectionResult(success=True, message="Logged in successfully")

    def logout(self) -> None:
        self._store.clear()

    def test_connection(self) -> ConnectionResult:
        """Probe the API with a board listing. Never raises."""

        try:
            self.get_boards()
        except EttError as e:
            return ConnectionResult(success=False, message=e.message or "Connection failed")
        return ConnectionResult(success=True, message="Connected successfully")

    def get_boards(self) -> list[Board]:
        path = "/issue-tracker/boards"
        return self._parse_list(Board, self._request_data("GET", path), path=path)

    def get_team_members(self) -> list[TeamMember]:
        path = "/issue-tracker/team-members"
        return self._parse_list(TeamMember, self._request_data("GET", path), path=path)

    def get_labels(self, board_id: int) -> list[Label]:
        path = f"/issue-tracker/boards/{board_id}/labels"
        return self._parse_list(Label, self._request_data("GET", path), path=path)

    def create_issue(self, request: CreateIssueRequest) -> Issue:
        path = "/issue-tracker/issues"
        logger.info("Creating issue", extra={"board_id": request.board_id, "title": request.title})

        data = self._request_data("POST", path, json=request.to_payload())
        try:
            issue = Issue.model_validate(data)
        except ValidationError as e:
            raise RemoteError(f"Invalid Issue in response for {path}") from e

        logger.info("Issue created", extra={"issue_id": issue.id, "title": issue.title})
        return issue

    def create_issues(
        self,
        issues: Sequence[CreateIssueRequest],
        *,
        on_created: Callable[[Issue], None] | None = None,
    ) -> list[Issue]:
        """Create issues one at a time, in input order.

        The first failure propagates and later requests are never sent. Issues
        created before the failure stay created; there is no rollback.
        """

        created: list[Issue] = []
        for request in issues:
            issue = self.create_issue(request)
            created.append(issue)
            if on_created is not None:
                on_created(issue)
        return created

    def close(self) -> None:
        self._http.close()

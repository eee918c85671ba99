"""Unit tests for TicketService (client mocked)."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from ett_ticket_bridge.bridge.ett.client import EttClient
from ett_ticket_bridge.bridge.ett.errors import (
    AuthenticationError,
    ConfigurationError,
    RemoteError,
)
from ett_ticket_bridge.bridge.ett.models import Board, CreateIssueRequest, Issue, ParsedTicket
from ett_ticket_bridge.bridge.ett.ticket_service import TicketService, select_tickets
from ett_ticket_bridge.bridge.session.storage import MemoryStorage
from ett_ticket_bridge.bridge.session.store import SessionStore


def _tickets(*titles: str) -> list[ParsedTicket]:
    return [ParsedTicket(title=t, description=f"{t} body", priority="high") for t in titles]


def _issue_for(request: CreateIssueRequest, issue_id: int) -> Issue:
    return Issue(
        id=issue_id,
        board_id=request.board_id,
        title=request.title,
        reporter_id=request.reporter_id,
    )


@pytest.fixture
def ett_client(authed_store: SessionStore) -> Mock:
    client = Mock(spec=EttClient)
    client.session_store = authed_store
    return client


@pytest.fixture
def service(ett_client: Mock) -> TicketService:
    return TicketService(client=ett_client)


def _create_issues_stub(fail_on: str | None = None, error: Exception | None = None):
    def create_issues(requests, *, on_created=None):
        created = []
        for n, request in enumerate(requests, start=1):
            if request.title == fail_on:
                raise error or RemoteError("boom", status_code=500)
            issue = _issue_for(request, n)
            created.append(issue)
            if on_created is not None:
                on_created(issue)
        return created

    return create_issues


def test_parse_summary_delegates_to_parser(service: TicketService) -> None:
    markdown = "## Suggested Tickets\n| **One** | First | low |\n"

    tickets = service.parse_summary(markdown)

    assert [(t.title, t.priority) for t in tickets] == [("One", "low")]


def test_resolve_board_id_defaults_to_first_board(
    service: TicketService, ett_client: Mock
) -> None:
    ett_client.get_boards.return_value = [Board(id=4, name="A"), Board(id=9, name="B")]

    assert service.resolve_board_id() == 4
    assert service.resolve_board_id(12) == 12
    ett_client.get_boards.assert_called_once_with()


def test_resolve_board_id_without_boards_is_an_error(
    service: TicketService, ett_client: Mock
) -> None:
    ett_client.get_boards.return_value = []

    with pytest.raises(ValueError, match="No boards"):
        service.resolve_board_id()


def test_build_requests_uses_session_user_as_reporter(service: TicketService) -> None:
    requests = service.build_requests(
        _tickets("A", "B"), board_id=3, assignee_id=11, label_ids=[1, 2]
    )

    assert [r.reporter_id for r in requests] == [7, 7]
    assert requests[0].to_payload() == {
        "board_id": 3,
        "title": "A",
        "description": "A body",
        "status": "backlog",
        "priority": "high",
        "assignee_id": 11,
        "reporter_id": 7,
        "label_ids": [1, 2],
    }


def test_build_requests_explicit_reporter_wins(service: TicketService) -> None:
    requests = service.build_requests(_tickets("A"), board_id=3, reporter_id=99)

    assert requests[0].reporter_id == 99


def test_build_requests_requires_a_selection(service: TicketService) -> None:
    with pytest.raises(ValueError, match="at least one ticket"):
        service.build_requests([], board_id=3)


def test_build_requests_without_identity_is_rejected(ett_client: Mock) -> None:
    logged_out = SessionStore(MemoryStorage())
    logged_out.init()
    ett_client.session_store = logged_out
    service = TicketService(client=ett_client)

    with pytest.raises(AuthenticationError, match="log in"):
        service.build_requests(_tickets("A"), board_id=3)


def test_submit_tickets_creates_all_in_order(service: TicketService, ett_client: Mock) -> None:
    ett_client.create_issues.side_effect = _create_issues_stub()

    report = service.submit_tickets(_tickets("A", "B", "C"), board_id=5)

    assert report.ok is True
    assert [i.title for i in report.created] == ["A", "B", "C"]
    assert report.not_attempted == 0
    sent = ett_client.create_issues.call_args.args[0]
    assert [r.board_id for r in sent] == [5, 5, 5]
    ett_client.get_boards.assert_not_called()


def test_submit_tickets_reports_partial_failure(service: TicketService, ett_client: Mock) -> None:
    ett_client.create_issues.side_effect = _create_issues_stub(fail_on="B")

    report = service.submit_tickets(_tickets("A", "B", "C", "D"), board_id=5)

    assert report.ok is False
    assert [i.title for i in report.created] == ["A"]
    assert report.failed_ticket is not None
    assert report.failed_ticket.title == "B"
    assert report.error == "boom"
    assert report.not_attempted == 2


def test_submit_tickets_reports_session_loss_mid_batch(
    service: TicketService, ett_client: Mock
) -> None:
    ett_client.create_issues.side_effect = _create_issues_stub(
        fail_on="A", error=AuthenticationError("Session expired. Please login again.")
    )

    report = service.submit_tickets(_tickets("A", "B"), board_id=5)

    assert report.created == []
    assert report.error == "Session expired. Please login again."
    assert report.not_attempted == 1


def test_submit_tickets_raises_configuration_errors(
    service: TicketService, ett_client: Mock
) -> None:
    ett_client.create_issues.side_effect = ConfigurationError(
        "Not authenticated. Please login first."
    )

    with pytest.raises(ConfigurationError):
        service.submit_tickets(_tickets("A"), board_id=5)


def test_select_tickets_keeps_table_order_and_drops_duplicates() -> None:
    tickets = _tickets("A", "B", "C")

    chosen = select_tickets(tickets, [3, 1, 3])

    assert [t.title for t in chosen] == ["A", "C"]


@pytest.mark.parametrize("index", [0, 4, -1])
def test_select_tickets_rejects_out_of_range(index: int) -> None:
    with pytest.raises(ValueError, match="out of range"):
        select_tickets(_tickets("A", "B", "C"), [index])

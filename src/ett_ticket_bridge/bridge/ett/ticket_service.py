"""Turn reviewed meeting-summary tickets into ETT issues.

Submission is sequential and non-atomic: when one create fails, the issues
already created stay on the tracker and the rest are not attempted. The
:class:`SubmissionReport` says exactly which prefix made it.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from ett_ticket_bridge.bridge.ett.client import EttClient
from ett_ticket_bridge.bridge.ett.errors import AuthenticationError, ConfigurationError, EttError
from ett_ticket_bridge.bridge.ett.models import CreateIssueRequest, Issue, ParsedTicket
from ett_ticket_bridge.bridge.summary.ticket_parser import parse_tickets_from_summary

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SubmissionReport:
    """Outcome of a batch submission."""

    created: list[Issue] = field(default_factory=list)
    failed_ticket: ParsedTicket | None = None
    error: str | None = None
    not_attempted: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


def select_tickets(tickets: Sequence[ParsedTicket], indexes: Sequence[int]) -> list[ParsedTicket]:
    """Pick tickets by 1-based position, keeping table order and dropping duplicates."""

    chosen: list[ParsedTicket] = []
    seen: set[int] = set()
    for index in sorted(indexes):
        if index < 1 or index > len(tickets):
            raise ValueError(f"Ticket number out of range: {index} (have {len(tickets)})")
        if index in seen:
            continue
        seen.add(index)
        chosen.append(tickets[index - 1])
    return chosen


class TicketService:
    """High-level, testable ticket promotion on top of :class:`EttClient`."""

    def __init__(self, *, client: EttClient) -> None:
        self._client = client

    def parse_summary(self, summary_markdown: str) -> list[ParsedTicket]:
        tickets = parse_tickets_from_summary(summary_markdown)
        logger.info("Parsed tickets from summary", extra={"ticket_count": len(tickets)})
        return tickets

    def resolve_board_id(self, board_id: int | None = None) -> int:
        """Return ``board_id``, or the first board the user can see."""

        if board_id is not None:
            return board_id

        boards = self._client.get_boards()
        if not boards:
            raise ValueError("No boards available; create a board in the tracker first")
        logger.debug("Defaulting to first board", extra={"board_id": boards[0].id})
        return boards[0].id

    def build_requests(
        self,
        tickets: Sequence[ParsedTicket],
        *,
        board_id: int,
        reporter_id: int | None = None,
        assignee_id: int | None = None,
        label_ids: list[int] | None = None,
    ) -> list[CreateIssueRequest]:
        if not tickets:
            raise ValueError("Please select at least one ticket")

        reporter = reporter_id
        if reporter is None:
            reporter = self._client.session_store.get_state().user_id
        if reporter is None:
            raise AuthenticationError("Please log in to create tickets")

        return [
            ticket.to_request(
                board_id=board_id,
                reporter_id=reporter,
                assignee_id=assignee_id,
                label_ids=label_ids,
            )
            for ticket in tickets
        ]

    def submit_tickets(
        self,
        tickets: Sequence[ParsedTicket],
        *,
        board_id: int | None = None,
        reporter_id: int | None = None,
        assignee_id: int | None = None,
        label_ids: list[int] | None = None,
    ) -> SubmissionReport:
        """Create one issue per ticket, in order, stopping at the first failure.

        Configuration errors are raised; remote and authentication failures
        during the batch are reported.
        """

        resolved_board = self.resolve_board_id(board_id)
        requests = self.build_requests(
            tickets,
            board_id=resolved_board,
            reporter_id=reporter_id,
            assignee_id=assignee_id,
            label_ids=label_ids,
        )

        report = SubmissionReport()
        try:
            self._client.create_issues(requests, on_created=report.created.append)
        except ConfigurationError:
            raise
        except EttError as e:
            failed_index = len(report.created)
            report.failed_ticket = tickets[failed_index]
            report.error = e.message
            report.not_attempted = len(tickets) - failed_index - 1
            logger.warning(
                "Ticket submission stopped early",
                extra={
                    "created_count": len(report.created),
                    "failed_title": report.failed_ticket.title,
                    "error": e.message,
                },
            )
            return report

        logger.info(
            "Tickets submitted",
            extra={"board_id": resolved_board, "created_count": len(report.created)},
        )
        return report

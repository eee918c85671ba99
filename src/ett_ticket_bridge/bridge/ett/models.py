"""Pydantic models mirroring the ETT issue tracker schema."""

from __future__ import annotations

from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, Field

IssueStatus = Literal["backlog", "todo", "in_progress", "in_review", "done", "cancelled", "blocker"]
IssuePriority = Literal["urgent", "high", "medium", "low", "none"]
BoardType = Literal["team", "personal"]

ISSUE_STATUSES: tuple[str, ...] = get_args(IssueStatus)
ISSUE_PRIORITIES: tuple[str, ...] = get_args(IssuePriority)

DEFAULT_PRIORITY: IssuePriority = "medium"
DEFAULT_STATUS: IssueStatus = "backlog"


class _TrackerModel(BaseModel):
    # The tracker may grow new fields; ignore them rather than failing to parse.
    model_config = ConfigDict(extra="ignore")


class Board(_TrackerModel):
    id: int
    name: str
    description: str | None = None
    type: BoardType = "team"


class TeamMember(_TrackerModel):
    id: int
    name: str
    email: str
    avatar_url: str | None = None


class Label(_TrackerModel):
    id: int
    board_id: int
    name: str
    color: str


class Issue(_TrackerModel):
    """An issue as returned by the tracker."""

    id: int | None = None
    board_id: int
    title: str
    description: str | None = None
    status: IssueStatus = DEFAULT_STATUS
    priority: IssuePriority = DEFAULT_PRIORITY
    assignee_id: int | None = None
    reporter_id: int
    due_date: str | None = None
    estimated_hours: float | None = None
    label_ids: list[int] = Field(default_factory=list)


class CreateIssueRequest(BaseModel):
    """Body of ``POST /issue-tracker/issues``.

    ``board_id`` and ``reporter_id`` are required: a request cannot be built
    without them.
    """

    board_id: int
    title: str = Field(min_length=1)
    description: str | None = None
    status: IssueStatus | None = None
    priority: IssuePriority | None = None
    assignee_id: int | None = None
    reporter_id: int
    due_date: str | None = None
    estimated_hours: float | None = Field(default=None, ge=0)
    label_ids: list[int] | None = None

    def to_payload(self) -> dict[str, object]:
        """JSON body with unset optional fields omitted."""

        return self.model_dump(mode="json", exclude_none=True)


class ParsedTicket(BaseModel):
    """A candidate ticket extracted from a meeting summary.

    Missing ``board_id`` and ``reporter_id``; see :meth:`to_request`.
    """

    title: str
    description: str = ""
    priority: IssuePriority = DEFAULT_PRIORITY
    status: IssueStatus = DEFAULT_STATUS

    def to_request(
        self,
        *,
        board_id: int,
        reporter_id: int,
        assignee_id: int | None = None,
        label_ids: list[int] | None = None,
    ) -> CreateIssueRequest:
        return CreateIssueRequest(
            board_id=board_id,
            title=self.title,
            description=self.description or None,
            status=self.status,
            priority=self.priority,
            assignee_id=assignee_id,
            reporter_id=reporter_id,
            label_ids=label_ids or None,
        )

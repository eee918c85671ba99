"""ETT issue tracker API: client, models, errors and ticket submission."""

from ett_ticket_bridge.bridge.ett.client import EttClient
from ett_ticket_bridge.bridge.ett.errors import (
    AuthenticationError,
    CallResult,
    ConfigurationError,
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
    ParsedTicket,
    TeamMember,
)
from ett_ticket_bridge.bridge.ett.ticket_service import SubmissionReport, TicketService

__all__ = [
    "AuthenticationError",
    "Board",
    "CallResult",
    "ConfigurationError",
    "ConnectionResult",
    "CreateIssueRequest",
    "ErrorKind",
    "EttClient",
    "EttError",
    "Issue",
    "Label",
    "ParsedTicket",
    "RemoteError",
    "SubmissionReport",
    "TeamMember",
    "TicketService",
]

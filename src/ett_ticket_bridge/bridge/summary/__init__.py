"""Meeting-summary parsing."""

from ett_ticket_bridge.bridge.summary.ticket_parser import parse_tickets_from_summary

__all__ = ["parse_tickets_from_summary"]

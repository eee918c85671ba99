#!/usr/bin/env python3
"""Programmatic ticket submission example.

This demonstrates using the bridge components directly:

* load settings from `.env`
* log in (or reuse the session stored under `ett_state/credentials.json`)
* parse the suggested tickets out of a meeting summary
* create them on a board, one at a time

The board is passed as an argument; the first visible board is used otherwise.
"""

from __future__ import annotations

import argparse
import getpass
from pathlib import Path
from typing import Sequence

from ett_ticket_bridge.bridge.config import BridgeSettings
from ett_ticket_bridge.bridge.ett.client import EttClient
from ett_ticket_bridge.bridge.ett.ticket_service import TicketService
from ett_ticket_bridge.bridge.logging import configure_logging
from ett_ticket_bridge.bridge.session.store import SessionStore


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Submit summary tickets (programmatic example).")
    parser.add_argument("summary", type=Path, help="Markdown meeting summary")
    parser.add_argument("--username", default=None, help="Log in first as this user (optional)")
    parser.add_argument("--board-id", type=int, default=None, help="Target board id (optional)")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = BridgeSettings()
    configure_logging(settings.log_level)

    store = SessionStore(settings.build_storage(), default_api_url=settings.api_url)
    store.init()
    client = EttClient(session_store=store, timeout=settings.request_timeout)

    try:
        if args.username:
            result = client.login(args.username, getpass.getpass("ETT password: "))
            print(result.message)
            if not result.success:
                return 1

        service = TicketService(client=client)
        tickets = service.parse_summary(args.summary.read_text(encoding="utf-8"))
        if not tickets:
            print("No suggested tickets found")
            return 0

        report = service.submit_tickets(tickets, board_id=args.board_id)
    finally:
        client.close()
        store.dispose()

    for issue in report.created:
        print(f"Created issue #{issue.id}: {issue.title}")
    if not report.ok:
        print(f"Stopped at {report.failed_ticket.title!r}: {report.error}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

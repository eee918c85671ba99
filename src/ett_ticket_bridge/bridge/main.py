"""CLI entrypoint for the ETT ticket bridge.

Every subcommand is a thin wrapper around :class:`EttClient`,
:class:`SessionStore` or :class:`TicketService`; output goes to stdout, logs
to stderr.
"""

from __future__ import annotations

import argparse
import getpass
import json
import logging
import sys
from pathlib import Path

from pydantic import BaseModel, ValidationError

from ett_ticket_bridge import __version__
from ett_ticket_bridge.bridge.config import BridgeSettings
from ett_ticket_bridge.bridge.ett.client import EttClient
from ett_ticket_bridge.bridge.ett.errors import (
    AuthenticationError,
    ConfigurationError,
    RemoteError,
)
from ett_ticket_bridge.bridge.ett.ticket_service import TicketService, select_tickets
from ett_ticket_bridge.bridge.logging import configure_logging
from ett_ticket_bridge.bridge.session.store import SessionStore

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIGURATION = 2
EXIT_AUTHENTICATION = 3
EXIT_PARTIAL = 4
EXIT_REMOTE = 5


def _parse_int_list(value: str | None) -> list[int] | None:
    if value is None:
        return None
    parts = [p.strip() for p in value.split(",")]
    try:
        numbers = [int(p) for p in parts if p]
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Expected comma-separated integers, got {value!r}") from e
    return numbers or None


def _read_summary(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _print_json(value: object) -> None:
    if isinstance(value, BaseModel):
        print(value.model_dump_json(indent=2))
        return
    if isinstance(value, list):
        items = [v.model_dump(mode="json") if isinstance(v, BaseModel) else v for v in value]
        print(json.dumps(items, indent=2, ensure_ascii=False))
        return
    print(json.dumps(value, indent=2, ensure_ascii=False, default=str))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ett-bridge",
        description="Create ETT issue-tracker tickets from meeting summaries",
    )
    parser.add_argument("--version", action="version", version=f"ett-ticket-bridge {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    login = subparsers.add_parser("login", help="Log in with username and password")
    login.add_argument("--username", required=True, help="ETT username")
    login.add_argument(
        "--password",
        default=None,
        help="ETT password (prompted for when omitted)",
    )
    login.add_argument(
        "--api-url",
        default=None,
        help="Tracker API base URL (defaults to ETT_API_URL)",
    )

    subparsers.add_parser("logout", help="Forget the stored session")

    configure = subparsers.add_parser(
        "configure", help="Store an API URL and access token directly"
    )
    configure.add_argument(
        "--api-url", default=None, help="Tracker API base URL (defaults to ETT_API_URL)"
    )
    configure.add_argument(
        "--token", default=None, help="Access token (defaults to ETT_ACCESS_TOKEN)"
    )
    configure.add_argument("--user-id", type=int, default=None, help="Your tracker user id")
    configure.add_argument("--user-name", default=None, help="Your tracker display name")
    configure.add_argument(
        "--verify",
        action="store_true",
        help="Test the connection and discard the configuration if it fails",
    )

    subparsers.add_parser("status", help="Show the current session (token redacted)")
    subparsers.add_parser("test-connection", help="Check that the tracker accepts the session")
    subparsers.add_parser("boards", help="List boards")
    subparsers.add_parser("members", help="List team members")

    labels = subparsers.add_parser("labels", help="List labels of a board")
    labels.add_argument("--board-id", type=int, required=True, help="Board id")

    parse_summary = subparsers.add_parser(
        "parse-summary", help="Show the tickets suggested in a meeting summary"
    )
    parse_summary.add_argument("path", help="Markdown summary file, or '-' for stdin")

    submit = subparsers.add_parser(
        "submit-summary", help="Create issues for the tickets suggested in a meeting summary"
    )
    submit.add_argument("path", help="Markdown summary file, or '-' for stdin")
    submit.add_argument(
        "--board-id",
        type=int,
        default=None,
        help="Target board (defaults to the first board you can see)",
    )
    submit.add_argument(
        "--select",
        type=_parse_int_list,
        default=None,
        help="Comma-separated 1-based ticket numbers to submit (default: all)",
    )
    submit.add_argument("--assignee-id", type=int, default=None, help="Assign every issue")
    submit.add_argument(
        "--label-ids",
        type=_parse_int_list,
        default=None,
        help="Comma-separated label ids applied to every issue",
    )
    submit.add_argument(
        "--reporter-id",
        type=int,
        default=None,
        help="Reporter user id (defaults to the logged-in user)",
    )
    submit.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the create requests without sending them (board id 0 unless --board-id)",
    )

    return parser


def _run(args: argparse.Namespace, settings: BridgeSettings, client: EttClient) -> int:
    store = client.session_store
    service = TicketService(client=client)

    if args.command == "login":
        password = args.password
        if password is None:
            password = getpass.getpass("ETT password: ")
        result = client.login(args.username, password, api_url=args.api_url)
        print(result.message)
        return EXIT_OK if result.success else EXIT_AUTHENTICATION

    if args.command == "logout":
        client.logout()
        print("Logged out")
        return EXIT_OK

    if args.command == "configure":
        store.configure_token(
            api_url=args.api_url if args.api_url is not None else settings.api_url,
            access_token=args.token if args.token is not None else settings.access_token,
            user_id=args.user_id,
            user_name=args.user_name,
        )
        if not args.verify:
            print("Configuration saved")
            return EXIT_OK

        result = client.test_connection()
        if not result.success:
            store.clear()
            print(f"Connection failed, configuration discarded: {result.message}")
            return EXIT_AUTHENTICATION
        print("Configuration saved and verified")
        return EXIT_OK

    if args.command == "status":
        _print_json(store.get_state())
        return EXIT_OK

    if args.command == "test-connection":
        result = client.test_connection()
        print(result.message)
        return EXIT_OK if result.success else EXIT_REMOTE

    if args.command == "boards":
        _print_json(client.get_boards())
        return EXIT_OK

    if args.command == "members":
        _print_json(client.get_team_members())
        return EXIT_OK

    if args.command == "labels":
        _print_json(client.get_labels(args.board_id))
        return EXIT_OK

    if args.command == "parse-summary":
        tickets = service.parse_summary(_read_summary(args.path))
        if not tickets:
            print("No suggested tickets found")
            return EXIT_OK
        for index, ticket in enumerate(tickets, start=1):
            print(f"{index}. [{ticket.priority}] {ticket.title}")
            if ticket.description:
                print(f"   {ticket.description}")
        return EXIT_OK

    if args.command == "submit-summary":
        tickets = service.parse_summary(_read_summary(args.path))
        if not tickets:
            print("No suggested tickets found")
            return EXIT_OK
        if args.select:
            tickets = select_tickets(tickets, args.select)

        if args.dry_run:
            board_id = args.board_id if args.board_id is not None else 0
            requests = service.build_requests(
                tickets,
                board_id=board_id,
                reporter_id=args.reporter_id,
                assignee_id=args.assignee_id,
                label_ids=args.label_ids,
            )
            _print_json([r.to_payload() for r in requests])
            return EXIT_OK

        report = service.submit_tickets(
            tickets,
            board_id=args.board_id,
            reporter_id=args.reporter_id,
            assignee_id=args.assignee_id,
            label_ids=args.label_ids,
        )
        for issue in report.created:
            print(f"Created issue #{issue.id}: {issue.title}")
        if not report.ok:
            failed = report.failed_ticket.title if report.failed_ticket else "?"
            print(
                f"Failed on {failed!r}: {report.error} "
                f"({len(report.created)} created, {report.not_attempted} not attempted)",
                file=sys.stderr,
            )
            return EXIT_PARTIAL
        print(f"Successfully created {len(report.created)} ticket(s)")
        return EXIT_OK

    logger.error("Unknown command", extra={"command": args.command})
    return EXIT_CONFIGURATION


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = BridgeSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return EXIT_CONFIGURATION

    configure_logging(settings.log_level)

    store = SessionStore(settings.build_storage(), default_api_url=settings.api_url)
    store.init()
    client = EttClient(session_store=store, timeout=settings.request_timeout)

    try:
        return _run(args, settings, client)

    except ConfigurationError as e:
        logger.warning(str(e))
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIGURATION

    except AuthenticationError as e:
        logger.warning(str(e))
        print(f"Authentication error: {e}", file=sys.stderr)
        return EXIT_AUTHENTICATION

    except RemoteError as e:
        logger.warning(str(e), extra={"status_code": e.status_code})
        print(f"ETT API error: {e}", file=sys.stderr)
        return EXIT_REMOTE

    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    except Exception:
        logger.exception("Command failed")
        return EXIT_FAILURE

    finally:
        client.close()
        store.dispose()


if __name__ == "__main__":
    raise SystemExit(main())

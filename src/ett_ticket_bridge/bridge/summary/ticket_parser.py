"""Extract suggested tickets from a markdown meeting summary.

This is a best-effort heuristic for one table layout, not a markdown parser:

    ## Suggested Tickets

    | Title | Description | Priority |
    |-------|-------------|----------|
    | **Fix login redirect** | Users land on a blank page | high |

Rules:
- only the section under a level-2 "Suggested Tickets" heading (any case) is read,
  up to the next level-2 heading or the end of the text
- the title cell may be wrapped in ``**``
- header and separator rows are skipped
- an unknown priority becomes ``medium``; status is always ``backlog``

Nothing here raises on odd input; rows that don't fit are ignored.
"""

from __future__ import annotations

import re

from ett_ticket_bridge.bridge.ett.models import (
    DEFAULT_PRIORITY,
    DEFAULT_STATUS,
    ISSUE_PRIORITIES,
    IssuePriority,
    ParsedTicket,
)

_SECTION_RE = re.compile(r"## Suggested Tickets\s*\n(.*?)(?=\n## |\Z)", re.IGNORECASE | re.DOTALL)

# | **Title** | Description | Priority |
# Cells never span lines, so a short malformed row can't swallow the next one.
_ROW_RE = re.compile(
    r"\|[ \t]*\*?\*?([^|*\n]+)\*?\*?[ \t]*\|[ \t]*([^|\n]+)[ \t]*\|[ \t]*(\w+)[ \t]*\|"
)


def find_suggested_tickets_section(summary_markdown: str) -> str | None:
    """Return the body of the "Suggested Tickets" section, or None."""

    match = _SECTION_RE.search(summary_markdown)
    if match is None:
        return None
    return match.group(1)


def normalize_priority(value: str) -> IssuePriority:
    normalized = value.strip().lower()
    if normalized in ISSUE_PRIORITIES:
        return normalized  # type: ignore[return-value]
    return DEFAULT_PRIORITY


def _is_header_or_separator(title: str) -> bool:
    return "title" in title.lower() or "---" in title


def parse_tickets_from_summary(summary_markdown: str) -> list[ParsedTicket]:
    """Parse candidate tickets from a meeting summary, in table order."""

    if not summary_markdown:
        return []

    section = find_suggested_tickets_section(summary_markdown)
    if section is None:
        return []

    tickets: list[ParsedTicket] = []
    for match in _ROW_RE.finditer(section):
        title, description, priority = match.groups()
        if _is_header_or_separator(title):
            continue

        title = title.strip()
        if not title:
            continue

        tickets.append(
            ParsedTicket(
                title=title,
                description=description.strip(),
                priority=normalize_priority(priority),
                status=DEFAULT_STATUS,
            )
        )
    return tickets

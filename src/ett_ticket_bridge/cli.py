"""Console-script entrypoint.

The CLI is implemented in `ett_ticket_bridge.bridge.main`.
"""

from __future__ import annotations

from ett_ticket_bridge.bridge.main import main

__all__ = ["main"]


if __name__ == "__main__":
    raise SystemExit(main())

"""ETT Ticket Bridge.

Connects a meeting-summary workflow to the ETT issue tracker:
- configuration loaded from `.env`
- structured logging
- a persisted, redacted session (login or pasted token)
- ticket extraction from markdown summaries and sequential issue creation
"""

__version__ = "0.1.0"

from ett_ticket_bridge.bridge.config import BridgeSettings

__all__ = ["__version__", "BridgeSettings"]

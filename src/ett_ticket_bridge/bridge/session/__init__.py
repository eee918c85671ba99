"""Session/config record and the storage it persists to."""

from ett_ticket_bridge.bridge.session.storage import (
    JsonFileStorage,
    KeyValueStorage,
    MemoryStorage,
    NullStorage,
)
from ett_ticket_bridge.bridge.session.store import (
    SESSION_STORAGE_KEY,
    SessionRecord,
    SessionState,
    SessionStore,
)

__all__ = [
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "NullStorage",
    "SESSION_STORAGE_KEY",
    "SessionRecord",
    "SessionState",
    "SessionStore",
]

"""Key-value storage backends for the session record.

The session store only needs three operations (get/set/remove on string values),
so storage is injected as a small protocol. Pick :class:`NullStorage` for
headless runs where nothing should be read from or written to disk.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    """Durable string storage scoped to the running client."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class JsonFileStorage:
    """JSON-file backed key-value storage.

    The file holds a single JSON object mapping keys to string values. A missing,
    unreadable or malformed file reads as empty.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            # ValueError covers both malformed JSON and undecodable bytes.
            logger.warning(
                "Storage file is not valid JSON; treating as empty",
                extra={"path": str(self._path)},
            )
            return {}

        if not isinstance(raw, dict):
            logger.warning(
                "Storage file has unexpected shape; treating as empty",
                extra={"path": str(self._path)},
            )
            return {}

        return {str(k): v for k, v in raw.items() if isinstance(v, str)}

    def _save(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key not in data:
            return
        del data[key]
        if data:
            self._save(data)
        else:
            self._path.unlink(missing_ok=True)


class MemoryStorage:
    """In-process storage; nothing survives the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class NullStorage:
    """Storage for non-interactive contexts: reads nothing, keeps nothing."""

    def get(self, key: str) -> str | None:
        return None

    def set(self, key: str, value: str) -> None:
        return None

    def remove(self, key: str) -> None:
        return None

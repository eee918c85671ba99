"""Unit tests for the key-value storage backends."""

from __future__ import annotations

import json
from pathlib import Path

from ett_ticket_bridge.bridge.session.storage import JsonFileStorage, MemoryStorage, NullStorage


def test_json_file_storage_roundtrip(tmp_path: Path) -> None:
    path = tmp_path / "state" / "credentials.json"
    storage = JsonFileStorage(path)

    assert storage.get("ett_auth") is None

    storage.set("ett_auth", '{"api_url": "x"}')
    storage.set("other", "value")

    assert storage.get("ett_auth") == '{"api_url": "x"}'
    assert json.loads(path.read_text(encoding="utf-8")) == {
        "ett_auth": '{"api_url": "x"}',
        "other": "value",
    }


def test_json_file_storage_remove_keeps_other_keys(tmp_path: Path) -> None:
    path = tmp_path / "credentials.json"
    storage = JsonFileStorage(path)
    storage.set("a", "1")
    storage.set("b", "2")

    storage.remove("a")

    assert storage.get("a") is None
    assert storage.get("b") == "2"


def test_json_file_storage_remove_last_key_deletes_file(tmp_path: Path) -> None:
    path = tmp_path / "credentials.json"
    storage = JsonFileStorage(path)
    storage.set("a", "1")

    storage.remove("a")
    storage.remove("a")

    assert not path.exists()


def test_json_file_storage_treats_invalid_json_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "credentials.json"
    path.write_text("{oops", encoding="utf-8")

    assert JsonFileStorage(path).get("ett_auth") is None


def test_json_file_storage_treats_unexpected_shape_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "credentials.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    assert JsonFileStorage(path).get("ett_auth") is None


def test_memory_storage_remove_missing_key_is_noop() -> None:
    storage = MemoryStorage({"a": "1"})

    storage.remove("missing")

    assert storage.get("a") == "1"


def test_null_storage_drops_writes() -> None:
    storage = NullStorage()

    storage.set("a", "1")

    assert storage.get("a") is None


def test_json_file_storage_treats_undecodable_bytes_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "credentials.json"
    path.write_bytes(b'{"ett_auth": "\xff\xfe"}')

    storage = JsonFileStorage(path)

    assert storage.get("ett_auth") is None
    storage.set("ett_auth", "fresh")
    assert storage.get("ett_auth") == "fresh"

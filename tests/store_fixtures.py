"""Shared helpers that build run folders and SQLite record stores for tests."""

from __future__ import annotations

import gzip
import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping

from discovery.ulid_codec import encode_timestamp

RANDOMNESS_SUFFIX = "0123456789ABCDEF"


def make_ulid(timestamp: datetime, suffix: str = RANDOMNESS_SUFFIX) -> str:
    """Build a 26-character ULID for an aware timestamp.

    Args:
        timestamp: Creation time.
        suffix: 16 randomness characters.

    Returns:
        ULID string.
    """
    millis = round(timestamp.astimezone(timezone.utc).timestamp() * 1000)
    return encode_timestamp(millis) + suffix


def make_run_dir(parent: Path, identifier: str, run_name: str) -> Path:
    """Create ``{identifier}_{run_name}`` under parent and return it."""
    run_dir = parent / f"{identifier}_{run_name}"
    run_dir.mkdir(parents=True)
    return run_dir


def gzip_json(value: object) -> bytes:
    """Encode a value as gzip-compressed UTF-8 JSON."""
    return gzip.compress(json.dumps(value).encode("utf-8"))


def pseudo_buffer(payload: bytes) -> dict[str, object]:
    """Wrap bytes the way a lossy serializer rewrites binary values."""
    return {"type": "Buffer", "data": list(payload)}


def write_store(store_path: Path, table_name: str, rows: Mapping[str, object]) -> None:
    """Write an ``{table}(id, data)`` SQLite file with the given rows."""
    connection = sqlite3.connect(store_path)
    try:
        connection.execute(f"CREATE TABLE {table_name} (id TEXT PRIMARY KEY, data BLOB)")
        connection.executemany(
            f"INSERT INTO {table_name} (id, data) VALUES (?, ?)",
            list(rows.items()),
        )
        connection.commit()
    finally:
        connection.close()

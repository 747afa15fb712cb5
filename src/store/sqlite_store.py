"""Read-only SQLite access for run record stores.

Each store is a single ``{table}(id, data)`` table. Connections are opened
with ``mode=ro`` and tuned for reads; tuning never affects results.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from core.constants import STORE_CACHE_SIZE_PAGES
from core.errors import OpenFailed
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


def open_read_only(store_path: Path, table_name: str) -> sqlite3.Connection:
    """Open a record store read-only and check that its table is readable.

    Args:
        store_path: SQLite file path.
        table_name: Table expected to hold ``id``/``data`` rows.

    Returns:
        Open connection, usable from any thread.

    Raises:
        OpenFailed: If the file cannot be opened, is not a database, or lacks
            the expected table.
    """
    try:
        connection = sqlite3.connect(
            f"{store_path.resolve().as_uri()}?mode=ro",
            uri=True,
            check_same_thread=False,
        )
    except sqlite3.Error as error:
        raise OpenFailed(f"Failed to open record store {store_path}: {error}.") from error
    try:
        _apply_read_pragmas(connection, store_path)
        table_row = connection.execute(
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?",
            (table_name,),
        ).fetchone()
    except sqlite3.Error as error:
        connection.close()
        raise OpenFailed(
            f"Failed to read record store {store_path}: {error}. "
            "The file may be corrupt or unreadable."
        ) from error
    if table_row is None:
        connection.close()
        raise OpenFailed(f"Record store {store_path} has no '{table_name}' table.")
    return connection


def fetch_record_data(connection: sqlite3.Connection, table_name: str, record_id: str) -> object:
    """Return the raw ``data`` column for one id, or ``None`` when absent."""
    row = connection.execute(
        f"SELECT data FROM {table_name} WHERE id = ?",
        (record_id,),
    ).fetchone()
    if row is None:
        return None
    return row[0]


def fetch_record_ids(connection: sqlite3.Connection, table_name: str) -> list[str]:
    """Return all ids of a store table in storage order."""
    rows = connection.execute(f"SELECT id FROM {table_name}").fetchall()
    return [str(row[0]) for row in rows]


def _apply_read_pragmas(connection: sqlite3.Connection, store_path: Path) -> None:
    try:
        connection.execute("PRAGMA journal_mode = WAL")
    except sqlite3.OperationalError as error:
        # Read-only files cannot always switch journal mode.
        _LOGGER.debug("record_store_journal_mode_unchanged", path=str(store_path), error=str(error))
    connection.execute("PRAGMA synchronous = NORMAL")
    connection.execute(f"PRAGMA cache_size = {STORE_CACHE_SIZE_PAGES}")

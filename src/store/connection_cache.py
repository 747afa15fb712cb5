"""Process-wide cache of read-only record-store connections per run directory.

One cache instance is constructed per process and passed to whoever serves
requests. Each entry owns the genome and/or feature connection of exactly one
run directory plus a lease deadline that slides forward on every acquire.
Expired leases are evicted on the next acquire and, optionally, by a
background sweep thread.
"""

from __future__ import annotations

import sqlite3
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator

from core.constants import (
    DEFAULT_IDLE_TIMEOUT_SECONDS,
    FEATURE_STORE_FILE_NAME,
    FEATURE_TABLE_NAME,
    GENOME_STORE_FILE_NAME,
    GENOME_TABLE_NAME,
)
from core.errors import NoStoreFound, OpenFailed
from core.logging_config import get_logger
from store.run_record_stores import RunRecordStores
from store.sqlite_store import open_read_only

_LOGGER = get_logger(__name__)


@dataclass
class StoreEntry:
    """Open connections of one run directory and their lease.

    ``lock`` serializes queries against ``close`` so a connection is never
    used while it is being closed.
    """

    run_path: Path
    genome_connection: sqlite3.Connection | None
    feature_connection: sqlite3.Connection | None
    deadline: float
    lock: threading.Lock = field(default_factory=threading.Lock)
    closed: bool = False

    def close(self) -> None:
        with self.lock:
            if self.closed:
                return
            self.closed = True
            for connection in (self.genome_connection, self.feature_connection):
                if connection is not None:
                    connection.close()


@dataclass
class _OpenLock:
    """Per-path open lock shared by the acquires currently waiting on it."""

    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class RecordStoreCache:
    """Cache of open record stores keyed by resolved run-directory path."""

    def __init__(
        self,
        idle_timeout_seconds: float = DEFAULT_IDLE_TIMEOUT_SECONDS,
        sweep_interval_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Create an empty cache.

        Args:
            idle_timeout_seconds: Lease length; renewed on every acquire.
            sweep_interval_seconds: Period of the background sweep started by
                ``start_sweeper``; defaults to a tenth of the idle timeout.
            clock: Monotonic time source in seconds.
        """
        self._idle_timeout = idle_timeout_seconds
        self._sweep_interval = sweep_interval_seconds or idle_timeout_seconds / 10
        self._clock = clock
        self._entries: dict[Path, StoreEntry] = {}
        self._open_locks: dict[Path, _OpenLock] = {}
        self._lock = threading.Lock()
        self._stop_sweeper = threading.Event()
        self._sweeper: threading.Thread | None = None

    def __enter__(self) -> "RecordStoreCache":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close_all()

    def __contains__(self, run_path: object) -> bool:
        if not isinstance(run_path, (str, Path)):
            return False
        with self._lock:
            return _cache_key(run_path) in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def open_paths(self) -> list[Path]:
        """Return run paths with an open entry, sorted."""
        with self._lock:
            return sorted(self._entries)

    def acquire(self, run_path: str | Path) -> RunRecordStores:
        """Return the record stores of a run directory, opening them on first use.

        Args:
            run_path: Run directory already validated by the caller.

        Returns:
            Handle pair bound to the cached entry.

        Raises:
            NoStoreFound: If neither store file exists; no entry is created.
            OpenFailed: If a present store file cannot be opened.
        """
        self.evict_expired()
        key = _cache_key(run_path)
        handles = self._renew(key)
        if handles is not None:
            return handles
        with self._open_lock(key):
            handles = self._renew(key)
            if handles is not None:
                return handles
            entry = self._open_entry(key)
            with self._lock:
                self._entries[key] = entry
        _LOGGER.info(
            "record_store_opened",
            path=str(key),
            has_genome_store=entry.genome_connection is not None,
            has_feature_store=entry.feature_connection is not None,
        )
        return RunRecordStores(entry, self._release)

    def close_one(self, run_path: str | Path) -> bool:
        """Close and remove one entry; return whether an entry existed."""
        key = _cache_key(run_path)
        with self._lock:
            entry = self._entries.pop(key, None)
        if entry is None:
            return False
        entry.close()
        _LOGGER.info("record_store_closed", path=str(key))
        return True

    def close_all(self) -> None:
        """Stop the sweeper, then close and remove every entry."""
        self.stop_sweeper()
        with self._lock:
            entries = list(self._entries.values())
            self._entries.clear()
        for entry in entries:
            entry.close()
        if entries:
            _LOGGER.info("record_store_closed_all", count=len(entries))

    def evict_expired(self) -> list[Path]:
        """Close entries whose lease has run out; return their paths."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.deadline <= now]
            evicted = [self._entries.pop(key) for key in expired]
        for entry in evicted:
            entry.close()
            _LOGGER.info("record_store_evicted", path=str(entry.run_path))
        return expired

    def start_sweeper(self) -> None:
        """Start a daemon thread that evicts expired entries periodically."""
        with self._lock:
            if self._sweeper is not None and self._sweeper.is_alive():
                return
            self._stop_sweeper.clear()
            self._sweeper = threading.Thread(
                target=self._sweep_loop, name="record-store-sweeper", daemon=True
            )
            self._sweeper.start()

    def stop_sweeper(self) -> None:
        """Stop the sweep thread if one is running."""
        self._stop_sweeper.set()
        sweeper = self._sweeper
        if sweeper is not None and sweeper is not threading.current_thread():
            sweeper.join()
        self._sweeper = None

    def _sweep_loop(self) -> None:
        while not self._stop_sweeper.wait(self._sweep_interval):
            self.evict_expired()

    def _renew(self, key: Path) -> RunRecordStores | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            entry.deadline = self._clock() + self._idle_timeout
        return RunRecordStores(entry, self._release)

    def _release(self, entry: StoreEntry) -> None:
        with self._lock:
            if self._entries.get(entry.run_path) is entry:
                del self._entries[entry.run_path]
        if not entry.closed:
            entry.close()
            _LOGGER.info("record_store_closed", path=str(entry.run_path))

    @contextmanager
    def _open_lock(self, key: Path) -> Iterator[None]:
        # Dropped once no acquire holds or waits on it.
        with self._lock:
            open_lock = self._open_locks.setdefault(key, _OpenLock())
            open_lock.users += 1
        try:
            with open_lock.lock:
                yield
        finally:
            with self._lock:
                open_lock.users -= 1
                if open_lock.users == 0:
                    del self._open_locks[key]

    def _open_entry(self, key: Path) -> StoreEntry:
        genome_path = key / GENOME_STORE_FILE_NAME
        feature_path = key / FEATURE_STORE_FILE_NAME
        has_genome_file = genome_path.is_file()
        has_feature_file = feature_path.is_file()
        if not has_genome_file and not has_feature_file:
            raise NoStoreFound(
                f"No record stores found in {key}: expected "
                f"{GENOME_STORE_FILE_NAME} or {FEATURE_STORE_FILE_NAME}."
            )
        genome_connection = (
            open_read_only(genome_path, GENOME_TABLE_NAME) if has_genome_file else None
        )
        try:
            feature_connection = (
                open_read_only(feature_path, FEATURE_TABLE_NAME) if has_feature_file else None
            )
        except OpenFailed:
            if genome_connection is not None:
                genome_connection.close()
            raise
        return StoreEntry(
            run_path=key,
            genome_connection=genome_connection,
            feature_connection=feature_connection,
            deadline=self._clock() + self._idle_timeout,
        )


def _cache_key(run_path: str | Path) -> Path:
    return Path(run_path).expanduser().resolve()

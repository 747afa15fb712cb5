"""Record lookups against the cached stores of one run directory.

A ``RunRecordStores`` is a lightweight view over a cache entry. Store-level
absence shows up as ``has_genome_store``/``has_feature_store`` being false;
an id missing from a present store returns ``None``.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

from core.constants import FEATURE_TABLE_NAME, GENOME_TABLE_NAME
from core.errors import DecodeFailed, InvalidRecordKind, StoreClosed
from core.logging_config import get_logger
from core.run_types import RecordKind
from store.record_decoder import (
    DecodeFailure,
    DecodeResult,
    WrappedBuffer,
    decode_record,
)
from store.sqlite_store import fetch_record_data, fetch_record_ids

if TYPE_CHECKING:
    from store.connection_cache import StoreEntry

_LOGGER = get_logger(__name__)

_KIND_ALIASES: dict[str, RecordKind] = {
    "genome": "genome",
    "genomes": "genome",
    "feature": "feature",
    "features": "feature",
}
_TABLE_NAMES: dict[RecordKind, str] = {
    "genome": GENOME_TABLE_NAME,
    "feature": FEATURE_TABLE_NAME,
}


def parse_record_kind(kind: str) -> RecordKind:
    """Normalize a record kind, accepting plural aliases.

    Raises:
        InvalidRecordKind: For anything other than genome(s) or feature(s).
    """
    parsed = _KIND_ALIASES.get(kind.strip().lower())
    if parsed is None:
        raise InvalidRecordKind(f"Invalid record kind {kind!r}. Use 'genome' or 'feature'.")
    return parsed


class RunRecordStores:
    """Genome and feature stores of one run directory."""

    def __init__(self, entry: StoreEntry, release: Callable[[StoreEntry], None]) -> None:
        self._entry = entry
        self._release = release

    @property
    def run_path(self) -> Path:
        return self._entry.run_path

    @property
    def has_genome_store(self) -> bool:
        return self._entry.genome_connection is not None

    @property
    def has_feature_store(self) -> bool:
        return self._entry.feature_connection is not None

    @property
    def closed(self) -> bool:
        return self._entry.closed

    def has_store(self, kind: str) -> bool:
        return self._connection(parse_record_kind(kind)) is not None

    def get_record_result(self, kind: str, record_id: str) -> DecodeResult | None:
        """Look up and decode one record, keeping the tagged decode result.

        Returns:
            ``None`` if the store or the id is absent, otherwise the result.

        Raises:
            InvalidRecordKind: For an unknown kind.
            StoreClosed: If the entry was closed or evicted.
        """
        record_kind = parse_record_kind(kind)
        connection = self._connection(record_kind)
        if connection is None:
            return None
        with self._entry.lock:
            self._ensure_open()
            try:
                raw_value = fetch_record_data(connection, _TABLE_NAMES[record_kind], record_id)
            except sqlite3.Error as error:
                return DecodeFailure(DecodeFailed(f"Failed to read record {record_id}: {error}."))
        if raw_value is None:
            return None
        return decode_record(raw_value)

    def get_record(self, kind: str, record_id: str) -> Any:
        """Look up one decoded record.

        Returns:
            The decoded value, the wrapper mapping when the row held an
            undecodable inner pseudo-buffer, or ``None`` when the store, the
            id, or a decodable payload is missing.

        Raises:
            InvalidRecordKind: For an unknown kind.
            StoreClosed: If the entry was closed or evicted.
        """
        result = self.get_record_result(kind, record_id)
        if result is None:
            return None
        if isinstance(result, DecodeFailure):
            _LOGGER.warning(
                "record_decode_failed",
                path=str(self.run_path),
                kind=kind,
                record_id=record_id,
                error=str(result.error),
            )
            return None
        if isinstance(result, WrappedBuffer):
            _LOGGER.warning(
                "record_inner_buffer_undecoded",
                path=str(self.run_path),
                kind=kind,
                record_id=record_id,
            )
            return dict(result.wrapper)
        return result.value

    def get_genome(self, record_id: str) -> Any:
        return self.get_record("genome", record_id)

    def get_feature(self, record_id: str) -> Any:
        return self.get_record("feature", record_id)

    def get_run_data(self, record_id: str) -> dict[str, Any]:
        """Return whichever of genome and features exist for one id.

        Keys ``genome`` and ``features`` are present only when found.
        """
        result: dict[str, Any] = {}
        genome = self.get_genome(record_id)
        if genome is not None:
            result["genome"] = genome
        features = self.get_feature(record_id)
        if features is not None:
            result["features"] = features
        return result

    def list_ids(self, kind: str) -> list[str]:
        """List every id in one store; an absent store lists nothing.

        Raises:
            InvalidRecordKind: For an unknown kind.
            StoreClosed: If the entry was closed or evicted.
        """
        record_kind = parse_record_kind(kind)
        connection = self._connection(record_kind)
        if connection is None:
            return []
        with self._entry.lock:
            self._ensure_open()
            try:
                return fetch_record_ids(connection, _TABLE_NAMES[record_kind])
            except sqlite3.Error as error:
                _LOGGER.error(
                    "record_ids_list_failed",
                    path=str(self.run_path),
                    kind=record_kind,
                    error=str(error),
                )
                return []

    def close(self) -> None:
        """Close both stores now and drop the cache entry."""
        self._release(self._entry)

    def _connection(self, kind: RecordKind) -> sqlite3.Connection | None:
        if kind == "genome":
            return self._entry.genome_connection
        return self._entry.feature_connection

    def _ensure_open(self) -> None:
        if self._entry.closed:
            raise StoreClosed(
                f"Record stores for {self.run_path} were closed. Acquire them again."
            )

"""Python SDK for browsing evolutionary runs.

This module exposes high-level APIs for run summaries, run folder listings,
genome/feature record lookups and rendered audio lookups. Every folder name
passed in is checked against the configured root before any store is opened.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from core.config import EvorunConfig
from core.errors import InvalidRecordKind, NoStoreFound, RecordNotFound, RunNotFound
from core.path_guard import resolve_under_root
from core.run_types import RenderFile, RunDirectory, RunFileListing, RunSummary, format_iso_millis
from discovery.render_catalog import list_render_files, render_file_path
from discovery.run_files import list_run_files
from discovery.run_scanner import discover
from discovery.run_summary import summarize
from store.connection_cache import RecordStoreCache
from store.run_record_stores import RunRecordStores

_ID_LIST_KINDS = ("all", "genomes", "features")


class EvorunClient:
    """Primary SDK entry point for browsing a runs root."""

    def __init__(
        self,
        config: EvorunConfig | None = None,
        cache: RecordStoreCache | None = None,
    ) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
            cache: Optional shared store cache; one is created when omitted.
        """
        self._config = config if config is not None else EvorunConfig.from_env()
        self._cache = (
            cache
            if cache is not None
            else RecordStoreCache(idle_timeout_seconds=self._config.idle_timeout_seconds)
        )

    def __enter__(self) -> "EvorunClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def config(self) -> EvorunConfig:
        return self._config

    @property
    def cache(self) -> RecordStoreCache:
        return self._cache

    def with_root_directory(self, root_directory: str) -> "EvorunClient":
        """Clone the client with a different runs root, sharing the store cache.

        Args:
            root_directory: New runs root path.

        Returns:
            New SDK client instance.
        """
        resolved_root = Path(root_directory).expanduser().resolve()
        return EvorunClient(replace(self._config, root_directory=resolved_root), self._cache)

    def summary(self, granularity: str | None = None) -> RunSummary:
        """Group runs under the root by time bucket and run name.

        Args:
            granularity: ``day``, ``week`` or ``month``; config default when omitted.

        Returns:
            Ordered run summary.

        Raises:
            InvalidGranularity: For an unsupported unit.
            RootNotFound: If the root directory is missing.
        """
        return summarize(
            self._config.root_directory,
            granularity or self._config.date_granularity,
            max_workers=self._config.scan_workers,
        )

    def list_runs(self) -> list[RunDirectory]:
        """Return every run directory under the root sorted by relative path."""
        return discover(self._config.root_directory, max_workers=self._config.scan_workers)

    def run_files(self, run_path: str, subdirectory: str = "") -> RunFileListing:
        """List one directory inside a run folder.

        Raises:
            PathOutsideRoot: If the target escapes the root.
            RunNotFound: If the directory does not exist.
        """
        return list_run_files(self._config.root_directory, run_path, subdirectory)

    def record_stores(self, folder_name: str) -> RunRecordStores:
        """Acquire the cached record stores of one run folder.

        Raises:
            PathOutsideRoot: If the folder escapes the root.
            RunNotFound: If the folder does not exist.
            NoStoreFound: If the folder has no record store.
            OpenFailed: If a store file exists but cannot be opened.
        """
        return self._cache.acquire(self._run_directory(folder_name))

    def genome(self, folder_name: str, record_id: str) -> Any:
        """Return one decoded genome.

        Raises:
            NoStoreFound: If the run has no genome store.
            RecordNotFound: If the genome is absent or undecodable.
        """
        stores = self.record_stores(folder_name)
        if not stores.has_genome_store:
            raise NoStoreFound(f"Genome database not found for evorun {folder_name}.")
        genome = stores.get_genome(record_id)
        if genome is None:
            raise RecordNotFound(f"Genome not found: {record_id}")
        return genome

    def features(self, folder_name: str, record_id: str) -> Any:
        """Return the decoded features of one genome.

        Raises:
            NoStoreFound: If the run has no feature store.
            RecordNotFound: If the features are absent or undecodable.
        """
        stores = self.record_stores(folder_name)
        if not stores.has_feature_store:
            raise NoStoreFound(f"Features database not found for evorun {folder_name}.")
        features = stores.get_feature(record_id)
        if features is None:
            raise RecordNotFound(f"Features not found: {record_id}")
        return features

    def run_data(self, folder_name: str, record_id: str) -> dict[str, Any]:
        """Return genome and features of one id, whichever exist.

        Raises:
            RecordNotFound: If neither store has the id.
        """
        data = self.record_stores(folder_name).get_run_data(record_id)
        if not data:
            raise RecordNotFound(f"No data found for ULID: {record_id}")
        return {"ulid": record_id, "folderName": folder_name, **data}

    def record_ids(self, folder_name: str, kind: str = "all") -> dict[str, list[str]]:
        """List genome and/or feature ids of one run folder.

        Args:
            folder_name: Run folder relative to the root.
            kind: ``all``, ``genomes`` or ``features``.

        Returns:
            Mapping with ``genomeIds`` and/or ``featureIds``.

        Raises:
            InvalidRecordKind: For an unsupported kind.
        """
        if kind not in _ID_LIST_KINDS:
            raise InvalidRecordKind(
                f"Invalid id list type {kind!r}. Use one of: {', '.join(_ID_LIST_KINDS)}."
            )
        stores = self.record_stores(folder_name)
        result: dict[str, list[str]] = {}
        if kind in ("all", "genomes"):
            result["genomeIds"] = stores.list_ids("genome")
        if kind in ("all", "features"):
            result["featureIds"] = stores.list_ids("feature")
        return result

    def render_path(
        self,
        folder_name: str,
        record_id: str,
        duration: str | float,
        pitch: str | int,
        velocity: str | int,
    ) -> Path:
        """Resolve the rendered WAV file of one genome.

        Raises:
            InvalidRenderParams: If render settings are invalid.
            RenderNotFound: If the file does not exist.
        """
        return render_file_path(
            self._config.render_directory, folder_name, record_id, duration, pitch, velocity
        )

    def list_renders(self, folder_name: str) -> list[RenderFile]:
        """List rendered WAV files of one run folder."""
        return list_render_files(self._config.render_directory, folder_name)

    def health(self) -> dict[str, object]:
        """Return a status payload with config and open store count."""
        return {
            "status": "ok",
            "timestamp": format_iso_millis(datetime.now(timezone.utc)),
            "config": self._config.to_payload(),
            "openStores": len(self._cache),
        }

    def close(self) -> None:
        """Close every cached record store."""
        self._cache.close_all()

    def _run_directory(self, folder_name: str) -> Path:
        run_path = resolve_under_root(self._config.root_directory, folder_name)
        if not run_path.is_dir():
            raise RunNotFound(f"Evorun directory not found: {folder_name}")
        return run_path

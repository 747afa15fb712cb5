"""Shared typed models.

This module defines immutable data models used by discovery, summary,
store and SDK layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

Granularity = Literal["day", "week", "month"]
RecordKind = Literal["genome", "feature"]


def format_iso_millis(timestamp: datetime) -> str:
    """Render a UTC timestamp as ISO-8601 with milliseconds and ``Z`` suffix."""
    utc_timestamp = timestamp.astimezone(timezone.utc)
    return utc_timestamp.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc_timestamp.microsecond // 1000:03d}Z"


@dataclass(frozen=True)
class RunDirectory:
    """One discovered run directory.

    Attributes:
        identifier: 26-character ULID prefix of the folder name.
        derived_name: Run name, i.e. the folder name after the first underscore.
        absolute_path: Absolute path of the run directory.
        relative_path: Path relative to the scanned root, POSIX separators.
        folder_name: Final path component.
    """

    identifier: str
    derived_name: str
    absolute_path: Path
    relative_path: str
    folder_name: str

    def to_payload(self) -> dict[str, str]:
        return {
            "ulid": self.identifier,
            "name": self.derived_name,
            "folderName": self.folder_name,
            "relativePath": self.relative_path,
        }


@dataclass(frozen=True)
class RunSummaryEntry:
    """Summary row for one run inside a bucket/name group."""

    identifier: str
    folder_name: str
    relative_path: str
    timestamp: datetime

    def to_payload(self) -> dict[str, str]:
        return {
            "ulid": self.identifier,
            "folderName": self.folder_name,
            "relativePath": self.relative_path,
            "timestamp": format_iso_millis(self.timestamp),
        }


@dataclass(frozen=True)
class RunSummary:
    """Time-bucketed grouping of discovered runs.

    Attributes:
        granularity: Bucket unit used for keys.
        root_directory: Scanned root.
        total_runs: Count of discovered runs, including ones with undecodable ids.
        groups: Bucket key -> run name -> entries, already in display order.
    """

    granularity: Granularity
    root_directory: Path
    total_runs: int
    groups: dict[str, dict[str, list[RunSummaryEntry]]] = field(default_factory=dict)

    def to_payload(self) -> dict[str, object]:
        return {
            "granularity": self.granularity,
            "rootDirectory": str(self.root_directory),
            "totalRuns": self.total_runs,
            "groups": {
                bucket_key: {
                    run_name: [entry.to_payload() for entry in entries]
                    for run_name, entries in name_groups.items()
                }
                for bucket_key, name_groups in self.groups.items()
            },
        }


@dataclass(frozen=True)
class RunFileEntry:
    """One directory entry inside a run folder."""

    name: str
    entry_type: Literal["file", "directory"]
    path: str
    size: int | None = None
    modified: datetime | None = None

    def to_payload(self) -> dict[str, object]:
        payload: dict[str, object] = {"name": self.name, "type": self.entry_type, "path": self.path}
        if self.entry_type == "file":
            payload["size"] = self.size
            payload["modified"] = format_iso_millis(self.modified) if self.modified else None
        return payload


@dataclass(frozen=True)
class RunFileListing:
    """Sorted listing of one directory inside a run folder."""

    run_path: str
    current_path: str
    directories: tuple[RunFileEntry, ...]
    files: tuple[RunFileEntry, ...]

    def to_payload(self) -> dict[str, object]:
        return {
            "currentPath": self.current_path,
            "evorunPath": self.run_path,
            "directories": [entry.to_payload() for entry in self.directories],
            "files": [entry.to_payload() for entry in self.files],
        }


@dataclass(frozen=True)
class RenderParameters:
    """Parsed render settings encoded in a WAV filename."""

    identifier: str
    duration: float
    pitch: int
    velocity: int


@dataclass(frozen=True)
class RenderFile:
    """One rendered WAV file in a render folder."""

    name: str
    size: int
    modified: datetime
    parameters: RenderParameters | None

    def to_payload(self) -> dict[str, object]:
        parameters = None
        if self.parameters is not None:
            parameters = {
                "ulid": self.parameters.identifier,
                "duration": self.parameters.duration,
                "pitch": self.parameters.pitch,
                "velocity": self.parameters.velocity,
            }
        return {
            "name": self.name,
            "size": self.size,
            "modified": format_iso_millis(self.modified),
            "parameters": parameters,
        }

"""Directory listings inside a single run folder."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath

from core.errors import ListingFailed, RunNotFound
from core.path_guard import resolve_under_root
from core.run_types import RunFileEntry, RunFileListing


def list_run_files(root: Path, run_path: str, subdirectory: str = "") -> RunFileListing:
    """List directories and files of a run folder or one of its subdirectories.

    Args:
        root: Configured runs root.
        run_path: Run folder path relative to root.
        subdirectory: Optional path inside the run folder.

    Returns:
        Listing with directories and files each sorted by name.

    Raises:
        PathOutsideRoot: If the target resolves outside root.
        RunNotFound: If the target directory does not exist.
        ListingFailed: If the directory or one of its entries cannot be read.
    """
    target = resolve_under_root(root, run_path, subdirectory)
    if not target.is_dir():
        raise RunNotFound(f"Directory not found: {run_path}/{subdirectory}".rstrip("/"))
    directories: list[RunFileEntry] = []
    files: list[RunFileEntry] = []
    try:
        with os.scandir(target) as entries:
            for entry in entries:
                relative = (
                    str(PurePosixPath(subdirectory, entry.name)) if subdirectory else entry.name
                )
                if entry.is_dir():
                    directories.append(
                        RunFileEntry(name=entry.name, entry_type="directory", path=relative)
                    )
                    continue
                stats = entry.stat()
                files.append(
                    RunFileEntry(
                        name=entry.name,
                        entry_type="file",
                        path=relative,
                        size=stats.st_size,
                        modified=datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc),
                    )
                )
    except OSError as error:
        raise ListingFailed(
            f"Failed to list {target}: {error}. Check directory permissions and retry."
        ) from error
    return RunFileListing(
        run_path=run_path,
        current_path=subdirectory,
        directories=tuple(sorted(directories, key=lambda item: item.name)),
        files=tuple(sorted(files, key=lambda item: item.name)),
    )

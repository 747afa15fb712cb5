"""Recursive discovery of ULID-named run directories.

A directory whose name starts with a ULID and an underscore is a run leaf
and is never descended into. Any other directory is scanned recursively.
Unlistable directories are logged and skipped so one bad subtree never
fails the whole scan.
"""

from __future__ import annotations

import os
import re
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from core.constants import FAILED_GENES_SUFFIX, RUN_FOLDER_PATTERN, ULID_LENGTH
from core.logging_config import get_logger
from core.run_types import RunDirectory
from discovery.ulid_codec import extract_run_name

_LOGGER = get_logger(__name__)
_RUN_FOLDER_RE = re.compile(RUN_FOLDER_PATTERN)


def is_run_folder_name(folder_name: str) -> bool:
    """Return whether a folder name starts with a ULID and underscore."""
    return _RUN_FOLDER_RE.match(folder_name) is not None


def discover(root: Path, max_workers: int | None = None) -> list[RunDirectory]:
    """Find run directories under a root.

    Args:
        root: Directory to scan.
        max_workers: Optional thread count; sibling subtrees are scanned in
            parallel when greater than one.

    Returns:
        Run directories sorted by relative path.
    """
    scan_root = Path(root).expanduser().resolve()
    if max_workers is not None and max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            runs = _scan_parallel(scan_root, scan_root, executor)
    else:
        runs = _scan_directory(scan_root, scan_root)
    return sorted(runs, key=lambda run: run.relative_path)


def _scan_directory(directory: Path, root: Path) -> list[RunDirectory]:
    runs, child_directories = _partition_entries(directory, root)
    for child in child_directories:
        runs.extend(_scan_directory(child, root))
    return runs


def _scan_parallel(
    directory: Path,
    root: Path,
    executor: ThreadPoolExecutor,
) -> list[RunDirectory]:
    # Only the first level fans out so workers never block on their own pool.
    runs, child_directories = _partition_entries(directory, root)
    futures = [executor.submit(_scan_directory, child, root) for child in child_directories]
    for future in futures:
        runs.extend(future.result())
    return runs


def _partition_entries(directory: Path, root: Path) -> tuple[list[RunDirectory], list[Path]]:
    """Split one directory's subdirectories into run leaves and folders to recurse.

    Args:
        directory: Directory to list.
        root: Scan root used for relative paths.

    Returns:
        Run leaves found directly in ``directory`` and non-run subdirectories.
    """
    runs: list[RunDirectory] = []
    child_directories: list[Path] = []
    try:
        with os.scandir(directory) as entries:
            subdirectory_names = sorted(entry.name for entry in entries if entry.is_dir())
    except OSError as error:
        _LOGGER.warning("run_directory_scan_failed", path=str(directory), error=str(error))
        return runs, child_directories
    for name in subdirectory_names:
        full_path = directory / name
        if not is_run_folder_name(name):
            child_directories.append(full_path)
            continue
        if name.endswith(FAILED_GENES_SUFFIX):
            continue
        runs.append(
            RunDirectory(
                identifier=name[:ULID_LENGTH],
                derived_name=extract_run_name(name),
                absolute_path=full_path,
                relative_path=full_path.relative_to(root).as_posix(),
                folder_name=name,
            )
        )
    return runs, child_directories

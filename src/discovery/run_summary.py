"""Summary view of run directories grouped by time bucket and run name.

Groups are rebuilt on every call. Bucket keys sort descending (most recent
first), run names ascending, and runs within a group by timestamp descending.
"""

from __future__ import annotations

import re
from datetime import timezone, tzinfo
from pathlib import Path

from core.constants import RUN_IDENTIFIER_PATTERN
from core.errors import InvalidIdentifier, RootNotFound
from core.logging_config import get_logger
from core.run_types import RunDirectory, RunSummary, RunSummaryEntry
from discovery.date_buckets import format_bucket_key, validate_granularity
from discovery.run_scanner import discover
from discovery.ulid_codec import decode_timestamp

_LOGGER = get_logger(__name__)
_RUN_IDENTIFIER_RE = re.compile(RUN_IDENTIFIER_PATTERN)


def summarize(
    root: Path,
    granularity: str,
    max_workers: int | None = None,
    tz: tzinfo = timezone.utc,
) -> RunSummary:
    """Discover runs under root and group them by time bucket and run name.

    Args:
        root: Root directory to scan.
        granularity: ``day``, ``week`` or ``month``.
        max_workers: Optional discovery thread count.
        tz: Zone whose calendar defines bucket boundaries.

    Returns:
        Summary with ordered groups. ``total_runs`` counts every discovered
        run, including runs skipped because their identifier did not decode.

    Raises:
        InvalidGranularity: For an unsupported unit.
        RootNotFound: If root does not exist.
    """
    checked_granularity = validate_granularity(granularity)
    scan_root = Path(root).expanduser().resolve()
    if not scan_root.is_dir():
        raise RootNotFound(
            f"Root directory not found: {scan_root}. Set EVORUN_ROOT_DIR to an existing directory."
        )
    runs = discover(scan_root, max_workers=max_workers)
    return RunSummary(
        granularity=checked_granularity,
        root_directory=scan_root,
        total_runs=len(runs),
        groups=group_runs(runs, checked_granularity, tz),
    )


def group_runs(
    runs: list[RunDirectory],
    granularity: str,
    tz: tzinfo = timezone.utc,
) -> dict[str, dict[str, list[RunSummaryEntry]]]:
    """Bucket runs and return the groups in display order."""
    validate_granularity(granularity)
    grouped: dict[str, dict[str, list[RunSummaryEntry]]] = {}
    for run in runs:
        entry = _summary_entry(run)
        if entry is None:
            continue
        bucket_key = format_bucket_key(entry.timestamp, granularity, tz)
        grouped.setdefault(bucket_key, {}).setdefault(run.derived_name, []).append(entry)
    return _sorted_groups(grouped)


def _summary_entry(run: RunDirectory) -> RunSummaryEntry | None:
    match = _RUN_IDENTIFIER_RE.match(run.folder_name)
    if match is None:
        _LOGGER.warning("run_identifier_missing", folder_name=run.folder_name)
        return None
    identifier = match.group(1)
    try:
        timestamp = decode_timestamp(identifier)
    except InvalidIdentifier as error:
        _LOGGER.warning(
            "run_identifier_undecodable", folder_name=run.folder_name, error=str(error)
        )
        return None
    return RunSummaryEntry(
        identifier=identifier,
        folder_name=run.folder_name,
        relative_path=run.relative_path,
        timestamp=timestamp,
    )


def _sorted_groups(
    grouped: dict[str, dict[str, list[RunSummaryEntry]]],
) -> dict[str, dict[str, list[RunSummaryEntry]]]:
    sorted_result: dict[str, dict[str, list[RunSummaryEntry]]] = {}
    for bucket_key in sorted(grouped, reverse=True):
        name_groups = grouped[bucket_key]
        sorted_result[bucket_key] = {
            run_name: sorted(name_groups[run_name], key=lambda entry: entry.timestamp, reverse=True)
            for run_name in sorted(name_groups)
        }
    return sorted_result

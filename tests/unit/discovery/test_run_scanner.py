"""Unit tests for recursive run directory discovery."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path

import pytest

from discovery.run_scanner import discover, is_run_folder_name
from tests.store_fixtures import make_run_dir, make_ulid

ULID_A = make_ulid(datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc))
ULID_B = make_ulid(datetime(2024, 2, 1, 8, 0, tzinfo=timezone.utc))
ULID_C = make_ulid(datetime(2024, 3, 3, 9, 0, tzinfo=timezone.utc))


def _build_tree(root: Path) -> None:
    make_run_dir(root, ULID_A, "mapelites_cppn")
    make_run_dir(root / "nested" / "deeper", ULID_B, "quality_diversity")
    make_run_dir(root, ULID_C, "mapelites_failed-genes")
    (root / "nested" / "empty").mkdir(parents=True)
    (root / f"{ULID_C}_not_a_dir.txt").write_text("file", encoding="utf-8")


def test_discover_finds_nested_runs_sorted_by_relative_path(tmp_path) -> None:
    """Runs at any depth should be found and ordered by relative path."""
    _build_tree(tmp_path)

    runs = discover(tmp_path)

    assert [run.relative_path for run in runs] == [
        f"{ULID_A}_mapelites_cppn",
        f"nested/deeper/{ULID_B}_quality_diversity",
    ]


def test_discover_splits_identifier_and_run_name(tmp_path) -> None:
    """Run names should keep every underscore after the identifier."""
    make_run_dir(tmp_path, ULID_A, "mapelites_cppn_v2")

    (run,) = discover(tmp_path)

    assert (
        run.identifier == ULID_A
        and run.derived_name == "mapelites_cppn_v2"
        and run.folder_name == f"{ULID_A}_mapelites_cppn_v2"
        and run.absolute_path == (tmp_path / run.folder_name).resolve()
    )


def test_discover_skips_failed_genes_folders_and_their_contents(tmp_path) -> None:
    """Failed-genes folders should be neither emitted nor recursed into."""
    failed_dir = make_run_dir(tmp_path, ULID_C, "mapelites_failed-genes")
    make_run_dir(failed_dir, ULID_A, "inner_run")

    assert discover(tmp_path) == []


def test_discover_does_not_recurse_into_run_folders(tmp_path) -> None:
    """A run folder is a leaf even when it contains run-like subfolders."""
    outer = make_run_dir(tmp_path, ULID_A, "outer")
    make_run_dir(outer, ULID_B, "inner")

    runs = discover(tmp_path)

    assert [run.derived_name for run in runs] == ["outer"]


def test_discover_parallel_matches_sequential(tmp_path) -> None:
    """Threaded discovery should return the same ordered result."""
    _build_tree(tmp_path)
    for index in range(5):
        make_run_dir(tmp_path / f"group{index}", ULID_A, f"run{index}")

    assert discover(tmp_path, max_workers=4) == discover(tmp_path)


@pytest.mark.skipif(
    not hasattr(os, "geteuid") or os.geteuid() == 0,
    reason="permission checks are bypassed for root",
)
def test_discover_skips_unlistable_directories(tmp_path) -> None:
    """An unreadable subtree should be skipped without failing the scan."""
    make_run_dir(tmp_path, ULID_A, "visible")
    locked = tmp_path / "locked"
    make_run_dir(locked, ULID_B, "hidden")
    locked.chmod(0)
    try:
        runs = discover(tmp_path)
    finally:
        locked.chmod(0o755)

    assert [run.derived_name for run in runs] == ["visible"]


def test_discover_on_missing_root_returns_nothing(tmp_path) -> None:
    """A missing root should be logged and yield no runs."""
    assert discover(tmp_path / "missing") == []


@pytest.mark.parametrize(
    ("folder_name", "expected"),
    [
        (f"{ULID_A}_run", True),
        (f"{ULID_A}_", True),
        (ULID_A, False),
        (f"{ULID_A.lower()}_run", False),
        ("plain-folder", False),
    ],
)
def test_is_run_folder_name(folder_name: str, expected: bool) -> None:
    """Only a 26-character upper-case identifier plus underscore marks a run."""
    assert is_run_folder_name(folder_name) is expected

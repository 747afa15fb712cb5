"""Unit tests for run folder listings."""

from __future__ import annotations

import pytest

from core.errors import ListingFailed, PathOutsideRoot, RunNotFound
from discovery import run_files
from discovery.run_files import list_run_files


def _build_run(tmp_path):
    run_dir = tmp_path / "01HM6AXF03ZZZZZZZZZZZZZZZZ_mapelites"
    (run_dir / "snapshots").mkdir(parents=True)
    (run_dir / "generations").mkdir()
    (run_dir / "genomes.sqlite").write_bytes(b"x" * 12)
    (run_dir / "config.json").write_text("{}", encoding="utf-8")
    (run_dir / "snapshots" / "elites_1.json").write_text("[]", encoding="utf-8")
    return run_dir


def test_list_run_files_sorts_directories_and_files(tmp_path) -> None:
    """Directories and files should be listed separately in name order."""
    run_dir = _build_run(tmp_path)

    listing = list_run_files(tmp_path, run_dir.name)

    assert [entry.name for entry in listing.directories] == ["generations", "snapshots"]
    assert [entry.name for entry in listing.files] == ["config.json", "genomes.sqlite"]
    assert listing.files[1].size == 12
    assert listing.files[1].modified is not None


def test_list_run_files_reports_subdirectory_relative_paths(tmp_path) -> None:
    """Entries inside a subdirectory carry paths relative to the run folder."""
    run_dir = _build_run(tmp_path)

    payload = list_run_files(tmp_path, run_dir.name, "snapshots").to_payload()

    assert payload["currentPath"] == "snapshots"
    assert payload["evorunPath"] == run_dir.name
    assert payload["directories"] == []
    assert payload["files"][0]["path"] == "snapshots/elites_1.json"
    assert payload["files"][0]["type"] == "file"
    assert payload["files"][0]["modified"].endswith("Z")


def test_list_run_files_rejects_traversal(tmp_path) -> None:
    """A subdirectory escaping the root should be refused."""
    run_dir = _build_run(tmp_path / "root")

    with pytest.raises(PathOutsideRoot):
        list_run_files(tmp_path / "root", run_dir.name, "../../..")


def test_list_run_files_raises_for_missing_directory(tmp_path) -> None:
    """A missing run folder should raise RunNotFound."""
    with pytest.raises(RunNotFound):
        list_run_files(tmp_path, "missing_run")


def test_list_run_files_wraps_read_errors(tmp_path, monkeypatch) -> None:
    """An unreadable directory should raise ListingFailed instead of OSError."""
    run_dir = _build_run(tmp_path)

    def _denied(path):
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr(run_files.os, "scandir", _denied)

    with pytest.raises(ListingFailed, match="Permission denied"):
        list_run_files(tmp_path, run_dir.name)

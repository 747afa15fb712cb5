"""Integration tests for browsing a runs root end to end."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from evorun import EvorunClient, EvorunConfig, RecordStoreCache
from tests.store_fixtures import gzip_json, make_run_dir, make_ulid, pseudo_buffer, write_store


def _build_root(root: Path) -> dict[str, str]:
    december = make_ulid(datetime(2023, 12, 31, 12, 0, tzinfo=timezone.utc))
    january = make_ulid(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))
    later_january = make_ulid(datetime(2024, 1, 6, 12, 0, tzinfo=timezone.utc))
    first = make_run_dir(root / "2023", december, "mapelites_cppn")
    second = make_run_dir(root / "2024" / "week1", january, "mapelites_cppn")
    third = make_run_dir(root / "2024", later_january, "mapelites_cppn")
    make_run_dir(root / "2024", later_january, "mapelites_cppn_failed-genes")
    write_store(
        first / "genomes.sqlite",
        "genomes",
        {"g-plain": gzip_json({"nodes": 1})},
    )
    write_store(
        second / "genomes.sqlite",
        "genomes",
        {
            "g-double": gzip_json(pseudo_buffer(gzip_json({"nodes": 2}))),
            "g-text": gzip_json(pseudo_buffer(json.dumps({"nodes": 3}).encode("utf-8"))),
        },
    )
    write_store(
        third / "features.sqlite",
        "features",
        {"g-feature": json.dumps(pseudo_buffer(gzip_json({"spread": 0.7})))},
    )
    return {
        "first": first.relative_to(root).as_posix(),
        "second": second.relative_to(root).as_posix(),
        "third": third.relative_to(root).as_posix(),
        "december": december,
        "january": january,
        "later_january": later_january,
    }


def test_browse_summary_and_records(tmp_path: Path) -> None:
    """Summaries, record lookups and cache eviction should work together."""
    root = tmp_path / "evoruns"
    layout = _build_root(root)
    now = [0.0]
    cache = RecordStoreCache(idle_timeout_seconds=30, clock=lambda: now[0])
    config = EvorunConfig(
        root_directory=root,
        render_directory=tmp_path / "evorenders",
        scan_workers=3,
    )

    with EvorunClient(config, cache) as client:
        weekly = client.summary("week")
        monthly = client.summary("month")

        assert weekly.total_runs == 3
        assert list(weekly.groups) == ["2024-W02", "2024-W01", "2023-W53"]
        assert list(monthly.groups) == ["2024-01", "2023-12"]
        assert [entry.identifier for entry in monthly.groups["2024-01"]["mapelites_cppn"]] == [
            layout["later_january"],
            layout["january"],
        ]

        assert client.genome(layout["first"], "g-plain") == {"nodes": 1}
        assert client.genome(layout["second"], "g-double") == {"nodes": 2}
        assert client.genome(layout["second"], "g-text") == {"nodes": 3}
        assert client.features(layout["third"], "g-feature") == {"spread": 0.7}
        assert len(cache) == 3

        now[0] = 31.0
        assert client.genome(layout["first"], "g-plain") == {"nodes": 1}
        assert cache.open_paths() == [(root / layout["first"]).resolve()]

    assert len(cache) == 0

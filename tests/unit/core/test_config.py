"""Unit tests for core config parsing."""

from __future__ import annotations

import pytest

from core.config import EvorunConfig, parse_granularity_setting
from core.errors import EvorunConfigError

_ENV_NAMES = (
    "EVORUN_ROOT_DIR",
    "EVORENDERS_ROOT_DIR",
    "DATE_GRANULARITY",
    "EVORUN_DB_IDLE_TIMEOUT_SECONDS",
    "EVORUN_SCAN_WORKERS",
    "EVORUN_CONFIG_FILE",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_from_env_uses_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Config should fall back to relative default directories and month buckets."""
    monkeypatch.chdir(tmp_path)

    config = EvorunConfig.from_env()

    assert config.root_directory == (tmp_path / "evoruns").resolve()
    assert config.render_directory == (tmp_path / "evorenders").resolve()
    assert config.date_granularity == "month"
    assert config.idle_timeout_seconds == 1800
    assert config.scan_workers == 1


def test_from_env_reads_directories_and_granularity(
    monkeypatch: pytest.MonkeyPatch, tmp_path
) -> None:
    """Config should resolve directories and normalize the granularity."""
    monkeypatch.setenv("EVORUN_ROOT_DIR", str(tmp_path / "runs"))
    monkeypatch.setenv("EVORENDERS_ROOT_DIR", str(tmp_path / "renders"))
    monkeypatch.setenv("DATE_GRANULARITY", " Week ")
    monkeypatch.setenv("EVORUN_DB_IDLE_TIMEOUT_SECONDS", "90")
    monkeypatch.setenv("EVORUN_SCAN_WORKERS", "4")

    config = EvorunConfig.from_env()

    assert config.root_directory == (tmp_path / "runs").resolve()
    assert config.render_directory == (tmp_path / "renders").resolve()
    assert config.date_granularity == "week"
    assert config.idle_timeout_seconds == 90.0
    assert config.scan_workers == 4


@pytest.mark.parametrize(
    "name,value",
    [
        ("DATE_GRANULARITY", "year"),
        ("EVORUN_DB_IDLE_TIMEOUT_SECONDS", "soon"),
        ("EVORUN_DB_IDLE_TIMEOUT_SECONDS", "0"),
        ("EVORUN_SCAN_WORKERS", "many"),
        ("EVORUN_SCAN_WORKERS", "0"),
    ],
)
def test_from_env_raises_for_invalid_values(
    monkeypatch: pytest.MonkeyPatch, name: str, value: str
) -> None:
    """Config should fail for malformed environment values."""
    monkeypatch.setenv(name, value)

    with pytest.raises(EvorunConfigError, match=name):
        EvorunConfig.from_env()


def test_env_overrides_config_file(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Environment values should take precedence over the YAML file."""
    config_file = tmp_path / "evorun.yaml"
    config_file.write_text(
        "version: 1\n"
        f"root_directory: {tmp_path / 'file-runs'}\n"
        "date_granularity: day\n"
        "scan_workers: 3\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("EVORUN_CONFIG_FILE", str(config_file))
    monkeypatch.setenv("DATE_GRANULARITY", "week")

    config = EvorunConfig.from_env()

    assert config.root_directory == (tmp_path / "file-runs").resolve()
    assert config.date_granularity == "week"
    assert config.scan_workers == 3


def test_to_payload_uses_display_keys(tmp_path) -> None:
    """Config payload should expose directories and settings by display name."""
    config = EvorunConfig(root_directory=tmp_path, render_directory=tmp_path / "renders")

    payload = config.to_payload()

    assert payload["rootDirectory"] == str(tmp_path)
    assert payload["evorenderDirectory"] == str(tmp_path / "renders")
    assert payload["dateGranularity"] == "month"


def test_parse_granularity_setting_rejects_unknown_unit() -> None:
    """Granularity parsing should list supported units on failure."""
    with pytest.raises(EvorunConfigError, match="day, week, month"):
        parse_granularity_setting("hour")

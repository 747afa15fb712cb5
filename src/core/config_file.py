"""YAML configuration file parsing.

This module loads an optional browser config file with one strict schema.
Environment variables override anything read here.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, cast

import yaml

from core.constants import CONFIG_FILE_VERSION, SUPPORTED_GRANULARITIES
from core.errors import EvorunConfigError

_ALLOWED_KEYS = {
    "version",
    "root_directory",
    "render_directory",
    "date_granularity",
    "idle_timeout_seconds",
    "scan_workers",
}


@dataclass(frozen=True)
class ConfigFileValues:
    """Values read from a config file; ``None`` means not set."""

    root_directory: str | None = None
    render_directory: str | None = None
    date_granularity: str | None = None
    idle_timeout_seconds: float | None = None
    scan_workers: int | None = None


def load_config_file(config_path: str) -> ConfigFileValues:
    """Load and validate a YAML config file from disk.

    Args:
        config_path: File path to YAML config.

    Returns:
        Parsed config values.

    Raises:
        EvorunConfigError: If file is missing, unreadable or fails schema checks.
    """
    payload = _load_yaml_payload(config_path)
    root_mapping = _expect_mapping(payload)
    _validate_root_keys(root_mapping)
    _parse_version(root_mapping)
    return ConfigFileValues(
        root_directory=_optional_string(root_mapping, "root_directory"),
        render_directory=_optional_string(root_mapping, "render_directory"),
        date_granularity=_parse_granularity(root_mapping),
        idle_timeout_seconds=_optional_positive_number(root_mapping, "idle_timeout_seconds"),
        scan_workers=_optional_worker_count(root_mapping),
    )


def _load_yaml_payload(config_path: str) -> object:
    config_file = Path(config_path).expanduser().resolve()
    if not config_file.exists():
        raise EvorunConfigError(
            f"Config file does not exist at {config_file}. "
            "Fix EVORUN_CONFIG_FILE or unset it."
        )
    try:
        payload = cast(object, yaml.safe_load(config_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise EvorunConfigError(
            f"Failed to read config file at {config_file}: {error}. "
            "Check file permissions and retry."
        ) from error
    except yaml.YAMLError as error:
        raise EvorunConfigError(
            f"Failed to parse YAML config at {config_file}: {error}. Fix YAML syntax and retry."
        ) from error
    if payload is None:
        raise EvorunConfigError(f"Config file at {config_file} is empty. Define 'version: 1'.")
    return payload


def _expect_mapping(value: object) -> Mapping[str, object]:
    if not isinstance(value, Mapping):
        raise EvorunConfigError(
            f"Invalid config file: expected object mapping, got {type(value).__name__}."
        )
    normalized_mapping = {}
    for key, payload in value.items():
        if not isinstance(key, str):
            raise EvorunConfigError(
                f"Invalid config file: expected string keys, got {type(key).__name__}."
            )
        normalized_mapping[key] = payload
    return normalized_mapping


def _validate_root_keys(root_mapping: Mapping[str, object]) -> None:
    unknown_keys = sorted(root_mapping.keys() - _ALLOWED_KEYS)
    if unknown_keys:
        raise EvorunConfigError(
            f"Unsupported config file keys: {', '.join(unknown_keys)}. "
            f"Allowed: {', '.join(sorted(_ALLOWED_KEYS))}."
        )


def _parse_version(root_mapping: Mapping[str, object]) -> int:
    raw_version = root_mapping.get("version")
    if not isinstance(raw_version, int) or isinstance(raw_version, bool):
        raise EvorunConfigError("Config field 'version' must be an integer. Set version: 1.")
    if raw_version != CONFIG_FILE_VERSION:
        raise EvorunConfigError(f"Unsupported config version {raw_version}. Use version: 1.")
    return raw_version


def _optional_string(root_mapping: Mapping[str, object], key: str) -> str | None:
    value = root_mapping.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise EvorunConfigError(f"Config field '{key}' must be a non-empty string.")
    return value


def _parse_granularity(root_mapping: Mapping[str, object]) -> str | None:
    value = _optional_string(root_mapping, "date_granularity")
    if value is None:
        return None
    if value not in SUPPORTED_GRANULARITIES:
        raise EvorunConfigError(
            f"Config field 'date_granularity' must be one of: "
            f"{', '.join(SUPPORTED_GRANULARITIES)}; got '{value}'."
        )
    return value


def _optional_positive_number(root_mapping: Mapping[str, object], key: str) -> float | None:
    value = root_mapping.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise EvorunConfigError(f"Config field '{key}' must be a positive number.")
    return float(value)


def _optional_worker_count(root_mapping: Mapping[str, object]) -> int | None:
    value = root_mapping.get("scan_workers")
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise EvorunConfigError("Config field 'scan_workers' must be an integer >= 1.")
    return value

"""Runtime configuration model for the evorun browser.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.config_file import ConfigFileValues, load_config_file
from core.constants import (
    DEFAULT_DATE_GRANULARITY,
    DEFAULT_IDLE_TIMEOUT_SECONDS,
    DEFAULT_RENDER_DIRECTORY,
    DEFAULT_ROOT_DIRECTORY,
    DEFAULT_SCAN_WORKERS,
    SUPPORTED_GRANULARITIES,
)
from core.errors import EvorunConfigError


@dataclass(frozen=True)
class EvorunConfig:
    """Validated runtime configuration.

    Attributes:
        root_directory: Root directory scanned for run folders.
        render_directory: Root directory holding rendered WAV files.
        date_granularity: Default time-bucket unit for summaries.
        idle_timeout_seconds: Idle lease for cached record-store connections.
        scan_workers: Thread count for directory discovery.
    """

    root_directory: Path
    render_directory: Path
    date_granularity: str = DEFAULT_DATE_GRANULARITY
    idle_timeout_seconds: float = DEFAULT_IDLE_TIMEOUT_SECONDS
    scan_workers: int = DEFAULT_SCAN_WORKERS

    @classmethod
    def from_env(cls) -> "EvorunConfig":
        """Build config from an optional YAML file and environment variables.

        Environment variables take precedence over values from the file
        named by ``EVORUN_CONFIG_FILE``.

        Returns:
            A validated config object.

        Raises:
            EvorunConfigError: If file or environment values are invalid.
        """
        config_file = os.getenv("EVORUN_CONFIG_FILE")
        file_values = load_config_file(config_file) if config_file else ConfigFileValues()
        root_value = os.getenv(
            "EVORUN_ROOT_DIR", file_values.root_directory or str(DEFAULT_ROOT_DIRECTORY)
        )
        render_value = os.getenv(
            "EVORENDERS_ROOT_DIR",
            file_values.render_directory or str(DEFAULT_RENDER_DIRECTORY),
        )
        granularity_value = os.getenv(
            "DATE_GRANULARITY", file_values.date_granularity or DEFAULT_DATE_GRANULARITY
        )
        idle_value = os.getenv("EVORUN_DB_IDLE_TIMEOUT_SECONDS")
        workers_value = os.getenv("EVORUN_SCAN_WORKERS")
        return cls(
            root_directory=Path(root_value).expanduser().resolve(),
            render_directory=Path(render_value).expanduser().resolve(),
            date_granularity=parse_granularity_setting(granularity_value),
            idle_timeout_seconds=(
                _parse_idle_timeout(idle_value)
                if idle_value is not None
                else file_values.idle_timeout_seconds or DEFAULT_IDLE_TIMEOUT_SECONDS
            ),
            scan_workers=(
                _parse_scan_workers(workers_value)
                if workers_value is not None
                else file_values.scan_workers or DEFAULT_SCAN_WORKERS
            ),
        )

    def to_payload(self) -> dict[str, object]:
        """Render config for display in health and config output."""
        return {
            "rootDirectory": str(self.root_directory),
            "evorenderDirectory": str(self.render_directory),
            "dateGranularity": self.date_granularity,
            "idleTimeoutSeconds": self.idle_timeout_seconds,
            "scanWorkers": self.scan_workers,
        }


def parse_granularity_setting(raw_value: str) -> str:
    """Validate a configured granularity value.

    Args:
        raw_value: Raw granularity string.

    Returns:
        Normalized granularity.

    Raises:
        EvorunConfigError: If the value is not a supported unit.
    """
    normalized = raw_value.strip().lower()
    if normalized not in SUPPORTED_GRANULARITIES:
        raise EvorunConfigError(
            f"Invalid DATE_GRANULARITY value '{raw_value}'. "
            f"Use one of: {', '.join(SUPPORTED_GRANULARITIES)}."
        )
    return normalized


def _parse_idle_timeout(raw_value: str) -> float:
    """Parse the idle timeout environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Positive timeout in seconds.

    Raises:
        EvorunConfigError: If value is not a positive number.
    """
    try:
        timeout = float(raw_value)
    except ValueError as error:
        raise EvorunConfigError(
            "Invalid EVORUN_DB_IDLE_TIMEOUT_SECONDS value: "
            f"expected number, got '{raw_value}'. "
            "Set EVORUN_DB_IDLE_TIMEOUT_SECONDS to a positive number of seconds."
        ) from error
    if timeout <= 0:
        raise EvorunConfigError(
            f"Invalid EVORUN_DB_IDLE_TIMEOUT_SECONDS value {raw_value}: must be positive."
        )
    return timeout


def _parse_scan_workers(raw_value: str) -> int:
    """Parse the discovery worker count environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Worker count of at least one.

    Raises:
        EvorunConfigError: If value is not a positive integer.
    """
    try:
        workers = int(raw_value)
    except ValueError as error:
        raise EvorunConfigError(
            "Invalid EVORUN_SCAN_WORKERS value: "
            f"expected integer, got '{raw_value}'. "
            "Set EVORUN_SCAN_WORKERS to a numeric value."
        ) from error
    if workers < 1:
        raise EvorunConfigError(
            f"Invalid EVORUN_SCAN_WORKERS value {raw_value}: must be at least 1."
        )
    return workers

"""Core constants used across evorun browser modules.

This module centralizes file names, patterns and defaults.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_ROOT_DIRECTORY = Path("evoruns")
DEFAULT_RENDER_DIRECTORY = Path("evorenders")
DEFAULT_DATE_GRANULARITY = "month"
SUPPORTED_GRANULARITIES = ("day", "week", "month")
DEFAULT_IDLE_TIMEOUT_SECONDS = 30 * 60
DEFAULT_SCAN_WORKERS = 1
CONFIG_FILE_VERSION = 1

ULID_LENGTH = 26
ULID_TIMESTAMP_LENGTH = 10
ULID_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
RUN_FOLDER_PATTERN = r"^[0-9A-Z]{26}_"
RUN_IDENTIFIER_PATTERN = r"^([0-9A-Z]{26})_"
FAILED_GENES_SUFFIX = "_failed-genes"

GENOME_STORE_FILE_NAME = "genomes.sqlite"
FEATURE_STORE_FILE_NAME = "features.sqlite"
GENOME_TABLE_NAME = "genomes"
FEATURE_TABLE_NAME = "features"
STORE_CACHE_SIZE_PAGES = 10000

RENDER_FILE_EXTENSION = ".wav"
RENDER_FILE_PATTERN = r"^([A-Z0-9]{26})-(.+)\.wav$"
MIDI_VALUE_MIN = 0
MIDI_VALUE_MAX = 127

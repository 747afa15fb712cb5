"""Rendered WAV lookup for genomes of a run.

Render files live under ``{render_root}/{folder}/{ULID}-{duration}_{pitch}_{velocity}.wav``.
"""

from __future__ import annotations

import math
import os
import re
from datetime import datetime, timezone
from pathlib import Path

from core.constants import (
    MIDI_VALUE_MAX,
    MIDI_VALUE_MIN,
    RENDER_FILE_EXTENSION,
    RENDER_FILE_PATTERN,
)
from core.errors import InvalidRenderParams, ListingFailed, RenderNotFound, RunNotFound
from core.path_guard import resolve_under_root
from core.run_types import RenderFile, RenderParameters

_RENDER_FILE_RE = re.compile(RENDER_FILE_PATTERN)


def format_render_params(duration: str | float, pitch: str | int, velocity: str | int) -> str:
    """Validate render settings and format them as ``duration_pitch_velocity``.

    Args:
        duration: Positive note duration in seconds.
        pitch: MIDI pitch in [0, 127].
        velocity: MIDI velocity in [0, 127].

    Returns:
        Filename fragment, e.g. ``1_60_100`` or ``0.5_60_100``.

    Raises:
        InvalidRenderParams: If a value is non-numeric or out of range.
    """
    try:
        parsed_duration = float(duration)
        parsed_pitch = int(pitch)
        parsed_velocity = int(velocity)
    except (TypeError, ValueError) as error:
        raise InvalidRenderParams(
            "Invalid render parameters: duration, pitch, and velocity must be numbers."
        ) from error
    if not math.isfinite(parsed_duration) or parsed_duration <= 0:
        raise InvalidRenderParams("Duration must be positive.")
    if not MIDI_VALUE_MIN <= parsed_pitch <= MIDI_VALUE_MAX:
        raise InvalidRenderParams("Pitch must be between 0 and 127.")
    if not MIDI_VALUE_MIN <= parsed_velocity <= MIDI_VALUE_MAX:
        raise InvalidRenderParams("Velocity must be between 0 and 127.")
    return f"{_format_number(parsed_duration)}_{parsed_pitch}_{parsed_velocity}"


def render_file_path(
    render_root: Path,
    folder_name: str,
    identifier: str,
    duration: str | float,
    pitch: str | int,
    velocity: str | int,
) -> Path:
    """Resolve an existing rendered WAV file.

    Raises:
        InvalidRenderParams: If render settings are invalid.
        PathOutsideRoot: If the file would resolve outside render_root.
        RenderNotFound: If no such file exists.
    """
    file_name = f"{identifier}-{format_render_params(duration, pitch, velocity)}{RENDER_FILE_EXTENSION}"
    wav_path = resolve_under_root(render_root, folder_name, file_name)
    if not wav_path.is_file():
        raise RenderNotFound(
            f"Rendered WAV file not found: {file_name} "
            f"(expected at {wav_path.relative_to(render_root.resolve())})."
        )
    return wav_path


def list_render_files(render_root: Path, folder_name: str) -> list[RenderFile]:
    """List rendered WAV files of one run folder sorted by name.

    Raises:
        PathOutsideRoot: If the folder resolves outside render_root.
        RunNotFound: If the render folder does not exist.
        ListingFailed: If the folder or one of its files cannot be read.
    """
    target = resolve_under_root(render_root, folder_name)
    if not target.is_dir():
        raise RunNotFound(f"Evorender directory not found: {folder_name}")
    render_files: list[RenderFile] = []
    try:
        with os.scandir(target) as entries:
            for entry in entries:
                if not entry.is_file() or not entry.name.endswith(RENDER_FILE_EXTENSION):
                    continue
                stats = entry.stat()
                render_files.append(
                    RenderFile(
                        name=entry.name,
                        size=stats.st_size,
                        modified=datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc),
                        parameters=parse_render_file_name(entry.name),
                    )
                )
    except OSError as error:
        raise ListingFailed(
            f"Failed to list render folder {target}: {error}. Check directory permissions."
        ) from error
    return sorted(render_files, key=lambda item: item.name)


def parse_render_file_name(file_name: str) -> RenderParameters | None:
    """Parse ULID and render settings from a WAV filename, if well-formed."""
    match = _RENDER_FILE_RE.match(file_name)
    if match is None:
        return None
    identifier, param_string = match.groups()
    parts = param_string.split("_")
    if len(parts) != 3:
        return None
    try:
        return RenderParameters(
            identifier=identifier,
            duration=float(parts[0]),
            pitch=int(parts[1]),
            velocity=int(parts[2]),
        )
    except ValueError:
        return None


def _format_number(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)

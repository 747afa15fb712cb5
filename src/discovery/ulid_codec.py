"""ULID timestamp decoding for run folder names.

A ULID's first 10 characters encode a 48-bit millisecond timestamp in
Crockford base-32. The 16 randomness characters are never interpreted.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

from core.constants import (
    RUN_IDENTIFIER_PATTERN,
    ULID_ALPHABET,
    ULID_TIMESTAMP_LENGTH,
)
from core.errors import InvalidIdentifier, MalformedName

_SYMBOL_VALUES = {symbol: value for value, symbol in enumerate(ULID_ALPHABET)}
_RUN_IDENTIFIER_RE = re.compile(RUN_IDENTIFIER_PATTERN)
_MAX_TIMESTAMP_MS = 2**48 - 1


def decode_timestamp_ms(identifier: str) -> int:
    """Decode the millisecond timestamp of a ULID.

    Args:
        identifier: ULID string; only the first 10 characters are read.

    Returns:
        Milliseconds since the Unix epoch.

    Raises:
        InvalidIdentifier: If a timestamp character is outside the alphabet
            or the decoded value exceeds 48 bits.
    """
    timestamp = 0
    for symbol in identifier[:ULID_TIMESTAMP_LENGTH]:
        value = _SYMBOL_VALUES.get(symbol)
        if value is None:
            raise InvalidIdentifier(
                f"Invalid ULID character {symbol!r} in {identifier!r}. "
                f"Timestamp characters must come from {ULID_ALPHABET}."
            )
        timestamp = timestamp * 32 + value
    if timestamp > _MAX_TIMESTAMP_MS:
        raise InvalidIdentifier(
            f"ULID timestamp in {identifier!r} exceeds 48 bits. "
            "The first character must be between 0 and 7."
        )
    return timestamp


def decode_timestamp(identifier: str) -> datetime:
    """Decode a ULID creation time as an aware UTC datetime.

    Raises:
        InvalidIdentifier: If a timestamp character is outside the alphabet,
            or the instant is past the last representable datetime.
    """
    timestamp_ms = decode_timestamp_ms(identifier)
    seconds, millis = divmod(timestamp_ms, 1000)
    try:
        decoded = datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as error:
        raise InvalidIdentifier(
            f"ULID {identifier!r} encodes a time outside the supported range: {error}."
        ) from error
    return decoded.replace(microsecond=millis * 1000)


def encode_timestamp(timestamp_ms: int) -> str:
    """Encode milliseconds into the 10-character ULID timestamp prefix."""
    if timestamp_ms < 0 or timestamp_ms > _MAX_TIMESTAMP_MS:
        raise InvalidIdentifier(f"Timestamp {timestamp_ms} does not fit in 48 bits.")
    symbols = []
    for _ in range(ULID_TIMESTAMP_LENGTH):
        timestamp_ms, value = divmod(timestamp_ms, 32)
        symbols.append(ULID_ALPHABET[value])
    return "".join(reversed(symbols))


def parse_folder_name(folder_name: str) -> tuple[str, str]:
    """Split a run folder name into ULID and run name.

    Args:
        folder_name: Folder name shaped ``{ULID}_{runName}``.

    Returns:
        Tuple of identifier and derived run name.

    Raises:
        MalformedName: If the name does not start with 26 ULID-like characters
            and an underscore.
    """
    match = _RUN_IDENTIFIER_RE.match(folder_name)
    if match is None:
        raise MalformedName(
            f"Folder name {folder_name!r} does not start with a 26-character ULID "
            "followed by '_'."
        )
    return match.group(1), extract_run_name(folder_name)


def extract_run_name(folder_name: str) -> str:
    """Return the folder name with its leading identifier segment removed."""
    _, separator, remainder = folder_name.partition("_")
    if not separator:
        return folder_name
    return remainder

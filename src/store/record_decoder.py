"""Decoding of gzip-compressed JSON rows from run record stores.

Rows are normally ``gzip(json(value))``. A serialization round-trip that
lost the binary type can leave a pseudo-buffer object
``{"type": "Buffer", "data": [byte, ...]}`` either in the column itself or
as the JSON payload after the first decompression, where it may wrap a
second gzip layer or plain JSON text.

The decode walks a fixed chain of states and returns a tagged result
instead of raising, so one bad row never aborts a listing.
"""

from __future__ import annotations

import gzip
import json
import zlib
from dataclasses import dataclass
from typing import Any, Mapping, Union

from core.errors import DecodeFailed, EvorunError, InvalidBlobFormat

PSEUDO_BUFFER_TYPE = "Buffer"
_GUNZIP_JSON_ERRORS = (
    OSError,
    EOFError,
    zlib.error,
    UnicodeDecodeError,
    ValueError,
    RecursionError,
)
_JSON_ERRORS = (UnicodeDecodeError, ValueError, RecursionError)


@dataclass(frozen=True)
class DecodedValue:
    """A structured value recovered from a stored row."""

    value: Any


@dataclass(frozen=True)
class WrappedBuffer:
    """An inner pseudo-buffer that could not be unwrapped into a value.

    Returned unparsed so callers can tell it apart from real record data.
    """

    wrapper: Mapping[str, Any]

    @property
    def raw_bytes(self) -> bytes:
        """Rebuild the wrapped bytes.

        Raises:
            InvalidBlobFormat: If the data array holds anything but 0..255 integers.
        """
        return pseudo_buffer_bytes(self.wrapper)


@dataclass(frozen=True)
class DecodeFailure:
    """A row that could not be decoded; ``error`` carries the reason."""

    error: EvorunError


DecodeResult = Union[DecodedValue, WrappedBuffer, DecodeFailure]


def is_pseudo_buffer(value: object) -> bool:
    """Return whether a value has the ``{"type": "Buffer", "data": [...]}`` shape."""
    return (
        isinstance(value, Mapping)
        and value.get("type") == PSEUDO_BUFFER_TYPE
        and isinstance(value.get("data"), list)
    )


def pseudo_buffer_bytes(wrapper: Mapping[str, Any]) -> bytes:
    """Rebuild the byte sequence held by a pseudo-buffer.

    Raises:
        InvalidBlobFormat: If the data array holds anything but 0..255 integers.
    """
    data = wrapper["data"]
    if not all(isinstance(item, int) and not isinstance(item, bool) for item in data):
        raise InvalidBlobFormat("Pseudo-buffer data must be a list of integers.")
    try:
        return bytes(data)
    except ValueError as error:
        raise InvalidBlobFormat(f"Pseudo-buffer data out of byte range: {error}.") from error


def normalize_to_bytes(raw_value: object) -> bytes:
    """Turn a raw column value into bytes.

    Accepts ``bytes``-like values, a pseudo-buffer mapping, or a pseudo-buffer
    serialized as JSON text (how such rows come back from TEXT columns).

    Raises:
        InvalidBlobFormat: For any other value.
    """
    if isinstance(raw_value, (bytes, bytearray, memoryview)):
        return bytes(raw_value)
    if isinstance(raw_value, str):
        raw_value = _parse_pseudo_buffer_text(raw_value)
    if is_pseudo_buffer(raw_value):
        return pseudo_buffer_bytes(raw_value)  # type: ignore[arg-type]
    raise InvalidBlobFormat(
        f"Invalid data format: expected bytes or pseudo-buffer, got {type(raw_value).__name__}."
    )


def decode_record(raw_value: object) -> DecodeResult:
    """Decode one stored column value.

    Args:
        raw_value: Column value as read from the store.

    Returns:
        ``DecodedValue`` on success, ``WrappedBuffer`` when an inner
        pseudo-buffer could not be unwrapped, ``DecodeFailure`` otherwise.
        Never raises.
    """
    try:
        blob = normalize_to_bytes(raw_value)
    except InvalidBlobFormat as error:
        return DecodeFailure(error)
    try:
        parsed = _gunzip_json(blob)
    except _GUNZIP_JSON_ERRORS as error:
        return DecodeFailure(DecodeFailed(f"Failed to decompress stored record: {error}."))
    if not is_pseudo_buffer(parsed):
        return DecodedValue(parsed)
    try:
        inner_blob = pseudo_buffer_bytes(parsed)
    except InvalidBlobFormat:
        return WrappedBuffer(parsed)
    try:
        return DecodedValue(_gunzip_json(inner_blob))
    except _GUNZIP_JSON_ERRORS:
        pass
    try:
        return DecodedValue(_parse_json(inner_blob))
    except _JSON_ERRORS:
        return WrappedBuffer(parsed)


def decode_record_value(raw_value: object) -> Any:
    """Decode one stored column value or raise.

    Returns:
        The decoded value, or the wrapper mapping for a ``WrappedBuffer``.

    Raises:
        InvalidBlobFormat: If the column is neither bytes nor a pseudo-buffer.
        DecodeFailed: If the outer layer is not gzip-compressed JSON.
    """
    result = decode_record(raw_value)
    if isinstance(result, DecodeFailure):
        raise result.error
    if isinstance(result, WrappedBuffer):
        return dict(result.wrapper)
    return result.value


def encode_record(value: Any) -> bytes:
    """Encode a value the way writers store rows: gzip of UTF-8 JSON."""
    return gzip.compress(json.dumps(value).encode("utf-8"))


def _gunzip_json(blob: bytes) -> Any:
    return _parse_json(gzip.decompress(blob))


def _parse_json(payload: bytes) -> Any:
    return json.loads(payload.decode("utf-8"))


def _parse_pseudo_buffer_text(text: str) -> object:
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        return text

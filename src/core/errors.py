"""Evorun browser exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Callers map each type onto a distinct response: missing data versus
invalid input versus a store that exists but cannot be used.
"""

from __future__ import annotations


class EvorunError(Exception):
    """Base exception for all evorun browser failures."""


class EvorunConfigError(EvorunError):
    """Raised for invalid runtime configuration."""


class InvalidIdentifier(EvorunError):
    """Raised when a ULID timestamp contains a character outside the alphabet."""


class MalformedName(EvorunError):
    """Raised when a folder name does not start with a 26-character ULID."""


class InvalidGranularity(EvorunError):
    """Raised for an unsupported time-bucket unit."""


class RootNotFound(EvorunError):
    """Raised when the configured root directory does not exist."""


class PathOutsideRoot(EvorunError):
    """Raised when a requested path resolves outside its root directory."""


class RunNotFound(EvorunError):
    """Raised when a run directory does not exist under the root."""


class NoStoreFound(EvorunError):
    """Raised when a run directory holds neither record store file."""


class OpenFailed(EvorunError):
    """Raised when a record store file exists but cannot be opened."""


class StoreClosed(EvorunError):
    """Raised when a handle pair is used after its cache entry was closed."""


class InvalidRecordKind(EvorunError):
    """Raised for a record kind other than genome or feature."""


class RecordNotFound(EvorunError):
    """Raised when no record exists for an identifier."""


class InvalidBlobFormat(EvorunError):
    """Raised when a stored column is neither bytes nor a pseudo-buffer."""


class DecodeFailed(EvorunError):
    """Raised when a stored blob cannot be decompressed or parsed."""


class InvalidRenderParams(EvorunError):
    """Raised for non-numeric or out-of-range render parameters."""


class RenderNotFound(EvorunError):
    """Raised when a rendered WAV file is missing."""


class ListingFailed(EvorunError):
    """Raised when an existing directory cannot be listed or an entry cannot be read."""

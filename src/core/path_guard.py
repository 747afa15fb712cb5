"""Root containment checks for user-supplied relative paths."""

from __future__ import annotations

from pathlib import Path

from core.errors import PathOutsideRoot


def is_within_root(candidate: Path, root: Path) -> bool:
    """Return whether a resolved candidate path lies under a resolved root."""
    resolved_candidate = candidate.expanduser().resolve()
    resolved_root = root.expanduser().resolve()
    return resolved_candidate == resolved_root or resolved_root in resolved_candidate.parents


def resolve_under_root(root: Path, *parts: str) -> Path:
    """Join relative parts onto a root and reject escapes.

    Args:
        root: Trusted root directory.
        parts: Untrusted relative path segments.

    Returns:
        Resolved absolute path under root.

    Raises:
        PathOutsideRoot: If the joined path resolves outside root.
    """
    candidate = root.joinpath(*parts).resolve()
    if not is_within_root(candidate, root):
        raise PathOutsideRoot(
            f"Access denied: {'/'.join(parts)!r} resolves outside {root}."
        )
    return candidate

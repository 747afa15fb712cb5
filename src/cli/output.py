"""Shared stdout rendering for CLI commands."""

from __future__ import annotations

import json


def print_json(payload: object) -> None:
    """Print one JSON document to stdout."""
    print(json.dumps(payload, indent=2, ensure_ascii=False))

"""Evorun browser CLI entry points.
This module exposes commands for summaries, run listings and record lookups.
It maps argparse commands onto SDK calls and domain errors onto exit codes.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from cli.output import print_json
from cli.record_commands import (
    add_record_commands,
    run_data_command,
    run_features_command,
    run_genome_command,
    run_ids_command,
)
from cli.render_commands import (
    add_render_commands,
    run_render_path_command,
    run_renders_command,
)
from core.config import EvorunConfig
from core.constants import SUPPORTED_GRANULARITIES
from core.errors import (
    EvorunConfigError,
    EvorunError,
    InvalidGranularity,
    InvalidRecordKind,
    InvalidRenderParams,
    ListingFailed,
    OpenFailed,
    PathOutsideRoot,
)
from store.browser_sdk import EvorunClient

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_INVALID_INPUT = 2
EXIT_READ_FAILURE = 3

_INVALID_INPUT_ERRORS = (
    EvorunConfigError,
    InvalidGranularity,
    InvalidRecordKind,
    InvalidRenderParams,
    PathOutsideRoot,
)


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="evorun-browser",
        description="Browse evolutionary run directories and their record stores",
    )
    parser.add_argument("--root-dir", help="Override EVORUN_ROOT_DIR for this command")
    parser.add_argument("--render-dir", help="Override EVORENDERS_ROOT_DIR for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_summary_command(subparsers)
    _add_runs_command(subparsers)
    _add_files_command(subparsers)
    add_record_commands(subparsers)
    add_render_commands(subparsers)
    subparsers.add_parser("config", help="Print the effective configuration")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the evorun browser CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        with _build_client(args.root_dir, args.render_dir) as client:
            return _dispatch(parser, client, args)
    except EvorunError as error:
        print(f"error={error}", file=sys.stderr)
        return exit_code_for(error)


def exit_code_for(error: EvorunError) -> int:
    """Map a domain error onto a process exit code.

    Args:
        error: Raised domain error.

    Returns:
        2 for invalid input, 3 for unreadable stores or directories, 1 for
        anything missing.
    """
    if isinstance(error, _INVALID_INPUT_ERRORS):
        return EXIT_INVALID_INPUT
    if isinstance(error, (OpenFailed, ListingFailed)):
        return EXIT_READ_FAILURE
    return EXIT_NOT_FOUND


def _dispatch(
    parser: argparse.ArgumentParser,
    client: EvorunClient,
    args: argparse.Namespace,
) -> int:
    if args.command == "summary":
        return _run_summary_command(client, args)
    if args.command == "runs":
        return _run_runs_command(client)
    if args.command == "files":
        return _run_files_command(client, args)
    if args.command == "genome":
        return run_genome_command(client, args)
    if args.command == "features":
        return run_features_command(client, args)
    if args.command == "data":
        return run_data_command(client, args)
    if args.command == "ids":
        return run_ids_command(client, args)
    if args.command == "renders":
        return run_renders_command(client, args)
    if args.command == "render-path":
        return run_render_path_command(client, args)
    if args.command == "config":
        print_json(client.config.to_payload())
        return EXIT_OK
    parser.error(f"Unsupported command: {args.command}")
    return EXIT_INVALID_INPUT


def _build_client(root_dir: str | None, render_dir: str | None) -> EvorunClient:
    """Build SDK client with optional directory overrides.

    Args:
        root_dir: Optional runs root override.
        render_dir: Optional render root override.

    Returns:
        Configured SDK client.
    """
    config = EvorunConfig.from_env()
    if root_dir:
        config = replace(config, root_directory=Path(root_dir).expanduser().resolve())
    if render_dir:
        config = replace(config, render_directory=Path(render_dir).expanduser().resolve())
    return EvorunClient(config)


def _run_summary_command(client: EvorunClient, args: argparse.Namespace) -> int:
    """Handle summary command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    summary = client.summary(args.granularity)
    print_json(summary.to_payload())
    return EXIT_OK


def _run_runs_command(client: EvorunClient) -> int:
    """Print discovered runs as JSON sorted by relative path."""
    runs = client.list_runs()
    print_json(
        {
            "rootDirectory": str(client.config.root_directory),
            "runs": [run.to_payload() for run in runs],
            "count": len(runs),
        }
    )
    return EXIT_OK


def _run_files_command(client: EvorunClient, args: argparse.Namespace) -> int:
    """Handle files command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    listing = client.run_files(args.run_path, args.subdir)
    print_json(listing.to_payload())
    return EXIT_OK


def _add_summary_command(subparsers: Any) -> None:
    """Register summary subcommand."""
    parser = subparsers.add_parser("summary", help="Group runs by date bucket and run name")
    parser.add_argument(
        "--granularity",
        choices=SUPPORTED_GRANULARITIES,
        help="Bucket unit; defaults to DATE_GRANULARITY",
    )


def _add_runs_command(subparsers: Any) -> None:
    """Register runs subcommand."""
    subparsers.add_parser("runs", help="List discovered run directories")


def _add_files_command(subparsers: Any) -> None:
    """Register files subcommand."""
    parser = subparsers.add_parser("files", help="List files inside a run folder")
    parser.add_argument("run_path", help="Run folder relative to the root directory")
    parser.add_argument("--subdir", default="", help="Subdirectory inside the run folder")

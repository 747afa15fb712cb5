"""Rendered audio commands for the evorun CLI."""

from __future__ import annotations

import argparse
from typing import Any

from cli.output import print_json
from store.browser_sdk import EvorunClient


def add_render_commands(subparsers: Any) -> None:
    """Register renders and render-path subcommands."""
    renders_parser = subparsers.add_parser("renders", help="List rendered WAV files of a run")
    renders_parser.add_argument("folder", help="Run folder relative to the render directory")
    path_parser = subparsers.add_parser(
        "render-path",
        help="Print the path of one rendered WAV file",
    )
    path_parser.add_argument("folder", help="Run folder relative to the render directory")
    path_parser.add_argument("ulid", help="Genome ULID")
    path_parser.add_argument("duration", help="Note duration in seconds")
    path_parser.add_argument("pitch", help="MIDI pitch 0-127")
    path_parser.add_argument("velocity", help="MIDI velocity 0-127")


def run_renders_command(client: EvorunClient, args: argparse.Namespace) -> int:
    """Print rendered WAV files with parsed render settings."""
    render_files = client.list_renders(args.folder)
    print_json(
        {
            "folderName": args.folder,
            "evorenderPath": str(client.config.render_directory / args.folder),
            "wavFiles": [render_file.to_payload() for render_file in render_files],
            "count": len(render_files),
        }
    )
    return 0


def run_render_path_command(client: EvorunClient, args: argparse.Namespace) -> int:
    """Print the absolute path of one rendered WAV file."""
    wav_path = client.render_path(args.folder, args.ulid, args.duration, args.pitch, args.velocity)
    print(wav_path)
    return 0

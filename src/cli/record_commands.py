"""Record lookup commands for the evorun CLI."""

from __future__ import annotations

import argparse
from typing import Any

from cli.output import print_json
from store.browser_sdk import EvorunClient


def add_record_commands(subparsers: Any) -> None:
    """Register genome, features, data and ids subcommands."""
    for command, help_text in (
        ("genome", "Print one decoded genome"),
        ("features", "Print the decoded features of one genome"),
        ("data", "Print genome and features of one id"),
    ):
        parser = subparsers.add_parser(command, help=help_text)
        parser.add_argument("folder", help="Run folder relative to the root directory")
        parser.add_argument("ulid", help="Genome ULID")
    ids_parser = subparsers.add_parser("ids", help="List genome and feature ids of a run")
    ids_parser.add_argument("folder", help="Run folder relative to the root directory")
    ids_parser.add_argument(
        "--type",
        dest="id_type",
        default="all",
        choices=("all", "genomes", "features"),
        help="Which store to list",
    )


def run_genome_command(client: EvorunClient, args: argparse.Namespace) -> int:
    """Print one genome wrapped with its identifiers."""
    genome = client.genome(args.folder, args.ulid)
    print_json({"ulid": args.ulid, "folderName": args.folder, "genome": genome})
    return 0


def run_features_command(client: EvorunClient, args: argparse.Namespace) -> int:
    """Print the features of one genome wrapped with its identifiers."""
    features = client.features(args.folder, args.ulid)
    print_json({"ulid": args.ulid, "folderName": args.folder, "features": features})
    return 0


def run_data_command(client: EvorunClient, args: argparse.Namespace) -> int:
    """Print genome and features of one id."""
    print_json(client.run_data(args.folder, args.ulid))
    return 0


def run_ids_command(client: EvorunClient, args: argparse.Namespace) -> int:
    """Print id lists of one run folder."""
    ids = client.record_ids(args.folder, args.id_type)
    print_json({"folderName": args.folder, **ids})
    return 0

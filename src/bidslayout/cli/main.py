"""
Command-line interface for bidslayout.

    bidslayout info <dataset>       summary of the indexed dataset
    bidslayout validate <dataset>   load the dataset and list the issues found
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .. import __version__
from ..config.settings import get_settings
from ..core.entity_config import get_entity_full_name
from ..core.exceptions import BIDSLayoutError
from ..core.repository import BidsRepository
from ..infrastructure.logging_config import setup_logging, get_logger

logger = get_logger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """
    Create the argument parser for the CLI.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="bidslayout",
        description="Index a BIDS dataset and report its layout"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"bidslayout {__version__}"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    parser.add_argument(
        "--no-log-file",
        action="store_true",
        help="Do not write a log file"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    for name, help_text in (
        ("info", "Display dataset information"),
        ("validate", "Load the dataset and list the issues found"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("dataset", type=Path, help="Path to BIDS dataset")
        mode = sub.add_mutually_exclusive_group()
        mode.add_argument("--tolerant", dest="tolerant", action="store_true", default=None,
                          help="Report description problems as warnings")
        mode.add_argument("--strict", dest="tolerant", action="store_false",
                          help="Stop at the first description problem")

    return parser


def _load(args: argparse.Namespace):
    repository = BidsRepository(args.dataset, tolerant=args.tolerant)
    return repository, repository.load()


def cmd_info(args: argparse.Namespace) -> int:
    """
    Display information about a BIDS dataset.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0 for success).
    """
    try:
        repository, dataset = _load(args)
    except BIDSLayoutError as e:
        logger.error(str(e))
        return 1

    stats = repository.get_summary_statistics()

    print(f"Dataset: {dataset.description.get('Name', 'Unknown')}")
    print(f"Root: {dataset.root_path}")
    print(f"BIDS Version: {dataset.description.get('BIDSVersion', 'unknown')}")
    print(f"{get_entity_full_name('sub')}s: {stats['subjects']}")
    print(f"{get_entity_full_name('ses')}s: {stats['sessions']}")
    for modality, count in stats['files'].items():
        print(f"  {modality}: {count} file(s)")
    if stats['tasks']:
        print(f"{get_entity_full_name('task')}s: {', '.join(stats['tasks'])}")
    if dataset.issues:
        print(f"Issues: {len(dataset.issues)} (run 'bidslayout validate' for details)")

    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """
    Load a BIDS dataset and print the issues recorded while indexing it.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0 when the dataset loads).
    """
    try:
        _, dataset = _load(args)
    except BIDSLayoutError as e:
        print(f"✗ {e}")
        return 1

    if not dataset.issues:
        print("✓ No issues found")
    for issue in dataset.issues:
        print(issue)

    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Returns:
        Exit code.
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    log_level = logging.DEBUG if args.verbose else settings.log_level
    setup_logging(
        level=log_level,
        log_file=settings.log_file_path,
        log_to_file=settings.log_to_file and not args.no_log_file
    )

    if args.command == "info":
        return cmd_info(args)
    elif args.command == "validate":
        return cmd_validate(args)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())

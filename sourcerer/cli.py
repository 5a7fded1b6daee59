from __future__ import annotations

import argparse
import sys
from typing import Sequence

from rich.console import Console

from .codegen import __version__
from .codegen.cli_integration import create_generate_subparser, create_plugins_subparser
from .logging_config import get_logger, setup_logging

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="sourcerer",
        description="🧙 Generate TypeScript modules from a Postgres introspection snapshot",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-file", help="Also write logs to this file")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    create_generate_subparser(subparsers)
    create_plugins_subparser(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line interface.

    Args:
        argv: Arguments without the program name; defaults to ``sys.argv[1:]``.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    level = "DEBUG" if getattr(args, "verbose", False) else "WARNING"
    setup_logging(level=level, log_file=args.log_file)

    if not getattr(args, "func", None):
        parser.print_help()
        return 1

    logger.debug("Running command: %s", args.command)
    try:
        return args.func(args)
    except KeyboardInterrupt:
        Console().print("\n[yellow]Interrupted[/yellow]")
        return 1


if __name__ == "__main__":
    sys.exit(main())

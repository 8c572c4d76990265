"""
CLI Main Entry Point

Usage:
    prophecy resolve "<question>" [--market-id ID] [--stake user:amount:yes] [--json]
    prophecy reconsider --market-id ID --outcome YES --evidence-cid CID [--json]
    prophecy serve [--host HOST] [--port PORT]
    prophecy config --init | --show

Environment Variables:
    PROPHECY_LOG_LEVEL          Log level (default: INFO)
    PROPHECY_LLM_PROVIDER       LLM provider (openai, anthropic, google, mock)
    PROPHECY_LLM_API_KEY        LLM API key
    PROPHECY_LEDGER_BACKEND     Ledger backend (memory, http)
    PROPHECY_STORAGE_BACKEND    Content store backend (memory, ipfs)
"""

from __future__ import annotations

import argparse
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from prophecy_cli import __version__
from prophecy_cli.commands import COMMANDS
from prophecy_cli.config import load_config


EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_SETTLEMENT_FAILED = 2

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Log to stderr so stdout stays parseable with --json; optionally also to a file."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prophecy",
        description="Prophecy oracle CLI: resolve markets, review new evidence and run the API.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Config file (default: ./prophecy.json or ~/.config/prophecy/config.json)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Overrides the configured log level",
    )
    subparsers = parser.add_subparsers(dest="command", title="commands")
    for command in COMMANDS:
        command.add_parser(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """
    Returns:
        0 on success, 1 on errors, 2 when settlement failed or was refused
    """
    parser = create_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    setup_logging(args.log_level or config.log_level, config.log_file)
    args.cli_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if getattr(args, "debug", False):
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())

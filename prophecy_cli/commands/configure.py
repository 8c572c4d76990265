"""
CLI Config Command

    prophecy config --init [--path prophecy.json]   write a template
    prophecy config --show [--path prophecy.json]   print the effective config
"""

from __future__ import annotations

import json
import sys
from argparse import Namespace
from pathlib import Path
from typing import Any

from prophecy_cli.config import get_default_config_template, load_config


EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def init_config(path: Path) -> int:
    if path.exists():
        print(f"Error: Config file already exists: {path}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    path.write_text(get_default_config_template())
    print(f"Created configuration file: {path}")
    print("PROPHECY_* environment variables override anything set in it.")
    return EXIT_SUCCESS


def show_config(path: Path) -> int:
    """Effective settings with secrets left out."""
    config = load_config(path if path.exists() else None)
    shown: dict[str, Any] = config.runtime.to_dict()
    shown["log_level"] = config.log_level
    shown["source"] = config.source or "(defaults)"
    print(json.dumps(shown, indent=2, default=str))
    return EXIT_SUCCESS


def config_cmd(args: Namespace) -> int:
    path = Path(args.path)
    if args.init:
        return init_config(path)
    if args.show:
        return show_config(path)
    args.print_help()
    return EXIT_SUCCESS


def add_parser(subparsers: Any) -> None:
    p = subparsers.add_parser(
        "config",
        help="Manage configuration",
        description="Create a template config file or show the effective configuration.",
    )
    action = p.add_mutually_exclusive_group()
    action.add_argument("--init", action="store_true", help="Write a template configuration file")
    action.add_argument("--show", action="store_true", help="Print the effective configuration")
    p.add_argument("--path", default="prophecy.json", help="Config file path (default: prophecy.json)")
    p.set_defaults(func=config_cmd, print_help=p.print_help)

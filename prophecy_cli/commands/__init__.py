"""
CLI command modules. Each exposes ``add_parser(subparsers)``.
"""

from prophecy_cli.commands import configure, reconsider, resolve, serve

COMMANDS = (resolve, reconsider, serve, configure)

__all__ = ["COMMANDS", "configure", "reconsider", "resolve", "serve"]

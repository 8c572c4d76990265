"""
CLI Serve Command

Runs the HTTP API under uvicorn with the CLI's resolved configuration.
"""

from __future__ import annotations

import os
from argparse import Namespace
from typing import Any

from prophecy_cli.config import CLIConfig


def serve_cmd(args: Namespace) -> int:
    import uvicorn

    from api.app import create_app
    from api.deps import build_service

    config: CLIConfig = getattr(args, "cli_config", None) or CLIConfig()
    service = build_service(config.runtime)
    # the app lifespan closes the service on shutdown
    uvicorn.run(create_app(service), host=args.host, port=args.port, log_level=config.log_level.lower())
    return 0


def add_parser(subparsers: Any) -> None:
    p = subparsers.add_parser("serve", help="Run the HTTP API", description="Serve the oracle API with uvicorn.")
    p.add_argument("--host", default="0.0.0.0", help="Bind address")
    p.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")), help="Port (default: $PORT or 8000)")
    p.set_defaults(func=serve_cmd)

"""
API Dependencies

Builds the OracleService the routes share and hands it out per request.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Optional

from fastapi import Request

from core.config.runtime import RuntimeConfig
from orchestrator.service import OracleService

logger = logging.getLogger(__name__)


def config_search_paths() -> list[Path]:
    return [
        Path.cwd() / "prophecy.json",
        Path.cwd() / ".prophecy.json",
        Path.home() / ".config" / "prophecy" / "config.json",
    ]


def _load_runtime_config(search_paths: Optional[list[Path]] = None) -> RuntimeConfig:
    """Load RuntimeConfig from config file, then overlay environment variables.

    Search order for config file:
      1. ./prophecy.json
      2. ./.prophecy.json
      3. ~/.config/prophecy/config.json

    Environment variables ALWAYS override config file values.
    The .env file is loaded automatically by core.config.runtime on import.
    """
    config: RuntimeConfig | None = None

    for path in search_paths or config_search_paths():
        if path.exists():
            try:
                with open(path) as f:
                    data = json.load(f)
                logger.info(f"Loaded config from {path}")
                config = RuntimeConfig.from_dict(data)
                break
            except Exception as e:
                logger.warning(f"Failed to parse {path}: {e}")

    if config is None:
        # No config file found, start with defaults
        config = RuntimeConfig()

    return config.with_env_overrides()


def build_service(config: Optional[RuntimeConfig] = None) -> OracleService:
    config = config or _load_runtime_config()
    if not config.llm.api_key and config.llm.provider != "mock":
        logger.warning(
            "No API key resolved for LLM provider '%s'; agents will fall back to "
            "UNCERTAIN verdicts. Set the provider env var or llm.api_key in prophecy.json.",
            config.llm.provider,
        )
    return OracleService.from_config(config)


_service_lock = threading.Lock()


def get_service(request: Request) -> OracleService:
    """
    FastAPI dependency: the application's OracleService, built on first use.

    Sync routes run on the threadpool, so the first build is serialized;
    the service owns the market store and must exist exactly once.
    """
    state = request.app.state
    service = getattr(state, "service", None)
    if service is None:
        with _service_lock:
            service = getattr(state, "service", None)
            if service is None:
                service = state.service = build_service()
    return service

"""
CLI Configuration

The CLI reads the same config file as the API (JSON, or YAML by extension),
overlaid with PROPHECY_* environment variables. ``log_level`` and
``log_file`` are CLI-only keys.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from core.config import RuntimeConfig


ENV_PREFIX = "PROPHECY_"

DEFAULT_CONFIG_PATHS = (
    Path("prophecy.json"),
    Path(".prophecy.json"),
    Path.home() / ".config" / "prophecy" / "config.json",
)


@dataclass
class CLIConfig:
    """Runtime configuration plus CLI-only settings."""

    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    log_level: str = "INFO"
    log_file: str | None = None
    source: str | None = None


def load_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r") as f:
        if path.suffix in (".yaml", ".yml"):
            return yaml.safe_load(f) or {}
        return json.load(f)


def load_config(config_path: Path | None = None) -> CLIConfig:
    """
    Load configuration from file and/or environment.

    An explicit ``config_path`` must exist; otherwise the default locations
    are searched and the first one found wins. Environment variables
    override file settings.
    """
    data: dict[str, Any] = {}
    source = None
    if config_path is not None:
        data = load_config_file(config_path)
        source = str(config_path)
    else:
        for candidate in DEFAULT_CONFIG_PATHS:
            if candidate.exists():
                data = load_config_file(candidate)
                source = str(candidate)
                break

    log_level = data.pop("log_level", "INFO")
    log_file = data.pop("log_file", None)
    runtime = RuntimeConfig.from_dict(data).with_env_overrides()

    return CLIConfig(
        runtime=runtime,
        log_level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", log_level),
        log_file=os.getenv(f"{ENV_PREFIX}LOG_FILE", log_file),
        source=source,
    )


def get_default_config_template() -> str:
    """Get a template configuration file."""
    template = RuntimeConfig().to_dict()
    template["llm"]["api_key"] = None
    template["log_level"] = "INFO"
    return json.dumps(template, indent=2, default=str) + "\n"

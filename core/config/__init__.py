"""
Runtime Configuration Module

Provides configuration loading and management for the oracle.
"""

from .runtime import (
    GenerationConfig,
    HttpConfig,
    LedgerConfig,
    LLMConfig,
    ReconsiderationConfig,
    ResolutionConfig,
    RuntimeConfig,
    SettlementConfig,
    StorageConfig,
    get_default_config,
    set_default_config,
)

__all__ = [
    "GenerationConfig",
    "HttpConfig",
    "LedgerConfig",
    "LLMConfig",
    "ReconsiderationConfig",
    "ResolutionConfig",
    "RuntimeConfig",
    "SettlementConfig",
    "StorageConfig",
    "get_default_config",
    "set_default_config",
]

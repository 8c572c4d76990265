"""
State Stores

Injected, lock-protected replacements for process-global maps:
the append-only log stream and the keyed market registry.
"""

from .logs import LogStore
from .markets import STATUS_TRANSITIONS, MarketStore

__all__ = [
    "LogStore",
    "MarketStore",
    "STATUS_TRANSITIONS",
]

"""
Test fixtures package.

Usage:
    from fixtures.common import make_service, research_json, judge_json

    def test_something():
        service = make_service([research_json(), judge_json("YES")])
"""

from .common import (
    DEFAULT_QUESTION,
    FlakyLedger,
    analyze_json,
    judge_json,
    make_config,
    make_service,
    mock_provider,
    recon_judgment_json,
    register_with_stakes,
    research_json,
)

__all__ = [
    "DEFAULT_QUESTION",
    "FlakyLedger",
    "analyze_json",
    "judge_json",
    "make_config",
    "make_service",
    "mock_provider",
    "recon_judgment_json",
    "register_with_stakes",
    "research_json",
]

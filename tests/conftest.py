"""
Pytest configuration and shared fixtures for the oracle tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

import importlib

_common = importlib.import_module("fixtures.common")

make_service = _common.make_service
make_config = _common.make_config


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """Keep PROPHECY_* settings from the developer's shell out of tests."""
    import os
    for key in list(os.environ):
        if key.startswith("PROPHECY_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def config():
    """RuntimeConfig with the mock provider and zero delays."""
    return make_config()


@pytest.fixture
def service():
    """OracleService over in-memory backends with no scripted model output."""
    svc = make_service()
    yield svc
    svc.close()


@pytest.fixture
def sleeps():
    """Recording sleep function: call it, then inspect ``sleeps.calls``."""
    calls: list[float] = []

    def _sleep(seconds: float) -> None:
        calls.append(seconds)

    _sleep.calls = calls
    return _sleep


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )

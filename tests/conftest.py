"""
Shared pytest fixtures for cvector tests.

Keeps the settings cache, CV_ environment variables and structlog
configuration from leaking between tests.
"""

import os
import sys
from pathlib import Path

import pytest
import structlog
from structlog.testing import capture_logs

# Ensure cvector package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cvector import settings as settings_module


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch):
    """Start every test with an empty settings cache and no CV_ variables."""
    for key in list(os.environ):
        if key.startswith("CV_"):
            monkeypatch.delenv(key, raising=False)
    settings_module._settings_cache.clear()
    yield
    settings_module._settings_cache.clear()


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def captured_logs():
    """Capture structlog events emitted during the test."""
    with capture_logs() as logs:
        yield logs

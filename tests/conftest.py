# ═══════════════════════════════════════════════════════════════
# cmdrunner - Pytest Configuration
# Shared fixtures for tests
# ═══════════════════════════════════════════════════════════════

import os
import sys
from unittest.mock import AsyncMock, MagicMock

import pytest

# Make the package importable without installing it
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from cmdrunner.core.config import get_settings
from cmdrunner.runners import Runner


@pytest.fixture
def inner_runner():
    """A mock inner runner recording every run() and env() call."""
    runner = MagicMock(spec=Runner)
    runner.run = AsyncMock(return_value=None)
    runner.env = MagicMock(return_value=None)
    return runner


@pytest.fixture
def fresh_settings():
    """Drop cached settings before and after the test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()

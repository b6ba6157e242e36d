"""Pytest configuration for all tests."""

import pytest
import structlog

from lunarconsole.core.config import get_settings


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Reload settings for every test so environment patches take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo configure_logging so no logger keeps a captured stream open."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()

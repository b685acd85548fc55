"""Shared test fixtures."""

import pytest
import structlog

from hostqueue.core.config import get_settings


@pytest.fixture(autouse=True)
def reset_state():
    """Start every test from default settings and logging."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    structlog.reset_defaults()

"""Pytest configuration and shared fixtures.

The engine is pure computation, so tests need no database or network:
- Settings are isolated from the developer's .env and environment
- Common instants and records used across service tests
"""

from datetime import UTC, datetime

import pytest

from core.config import clear_settings_cache
from services.timezone_service import get_device_timezone


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch: pytest.MonkeyPatch):
    """Keep DEFAULT_TIMEZONE/MILESTONE_DAYS from leaking into tests."""
    monkeypatch.delenv("DEFAULT_TIMEZONE", raising=False)
    monkeypatch.delenv("MILESTONE_DAYS", raising=False)
    clear_settings_cache()
    get_device_timezone.cache_clear()
    yield
    clear_settings_cache()
    get_device_timezone.cache_clear()


@pytest.fixture
def now() -> datetime:
    """A fixed instant: 2024-04-10 12:00 UTC."""
    return datetime(2024, 4, 10, 12, 0, tzinfo=UTC)

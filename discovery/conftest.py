"""Pytest configuration for discovery tests."""

import os
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

import discovery.services.categorizer as categorizer
from discovery.config import get_settings
from discovery.models.events import EventRecord

# Wednesday noon; every test passes it explicitly as the reference time
NOW = datetime(2025, 6, 4, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def reset_env():
    """Reset environment variables between tests."""
    original = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original)


@pytest.fixture(autouse=True)
def reset_singletons():
    """Drop cached settings and the global bucket registry."""
    get_settings.cache_clear()
    categorizer._registry = None
    yield
    get_settings.cache_clear()
    categorizer._registry = None


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_event():
    """Factory for events starting relative to NOW."""

    def _make(
        event_id: str,
        *,
        start: timedelta | None = timedelta(days=1),
        duration: timedelta | None = timedelta(minutes=90),
        rating: float | None = None,
        **fields: Any,
    ) -> EventRecord:
        start_at = NOW + start if start is not None else None
        end_at = start_at + duration if start_at is not None and duration is not None else None
        fields.setdefault("name", f"Event {event_id}")
        return EventRecord(
            id=event_id,
            start_date_time=start_at,
            end_date_time=end_at,
            creator={"pointsAsCreator": rating},
            **fields,
        )

    return _make

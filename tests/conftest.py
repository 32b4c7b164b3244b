"""Shared fixtures: a controllable clock, a call-counting source, event factories."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest

from sportevents.cache.store import EventCache
from sportevents.core.contracts.event import SportEvent
from sportevents.core.errors import EventsError
from sportevents.remote.base import EventSource

START = datetime(2025, 6, 1, 9, 0, 0, tzinfo=UTC)


class FakeClock:
    """Clock whose time only moves when a test says so."""

    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class StubSource(EventSource):
    """Remote source returning canned events (or raising) and counting calls."""

    def __init__(
        self, events: list[SportEvent] | None = None, error: EventsError | None = None
    ) -> None:
        self.events = list(events or [])
        self.error = error
        self.calls = 0

    def fetch_events(self) -> list[SportEvent]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.events)


def event_payload(event_id: int, **overrides: Any) -> dict[str, Any]:
    """Return a complete API record for one event (wire date format)."""
    payload: dict[str, Any] = {
        "id": event_id,
        "name": f"City Marathon {event_id}",
        "date": "2025-09-14T08:30:00",
        "photo_main": "/events/marathon.jpg",
        "icon_names": "run",
        "full_description": "Annual road race through the old town.",
        "short_description": "Road race",
        "organizer": "Run Club",
        "website_url": "https://example.org/marathon",
        "available_distances": "5K,10K,42K",
        "event_format": "in_person",
        "age_categories": "18+",
        "address": "Central Square 1",
        "latitude": 55.75,
        "longitude": 37.62,
        "contact_phone": "+10000000000",
        "contact_email": "info@example.org",
        "registration_url": "https://example.org/register",
        "registration_deadline": "2025-09-01T23:59:00",
        "max_participants": 500,
        "current_participants": 120,
        "price": "30 EUR",
        "photo_gallery": "a.jpg, b.jpg,,c.jpg",
        "video_url": None,
        "city_id": 1,
        "city": {"id": 1, "name": "Springfield"},
        "sports": [{"id": 3, "name": "Running", "icon_name": "run"}],
        "city_name": "Springfield",
        "sport_name": "Running",
        "is_upcoming": True,
        "can_register": True,
        "occupancy_percentage": 24.0,
        "available_spots": 380,
        "available_distances_array": ["5K", "10K", "42K"],
    }
    payload.update(overrides)
    return payload


def make_event(event_id: int, **overrides: Any) -> SportEvent:
    """Build a `SportEvent` with aware datetimes and every field set."""
    data = event_payload(
        event_id,
        date=datetime(2025, 9, 14, 8, 30, tzinfo=UTC),
        registration_deadline=datetime(2025, 9, 1, 23, 59, tzinfo=UTC),
    )
    data.update(overrides)
    return SportEvent.model_validate(data)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(tmp_path: Path, clock: FakeClock) -> EventCache[SportEvent]:
    """A `SportEvent` cache in a temporary directory driven by `clock`."""
    return EventCache(tmp_path / "cache", clock=clock)


@pytest.fixture
def make_events() -> Callable[..., list[SportEvent]]:
    """Return ``f(*ids)`` producing one event per id."""

    def _make(*ids: int) -> list[SportEvent]:
        return [make_event(i) for i in ids]

    return _make


@pytest.fixture
def wire_event() -> Callable[..., dict[str, Any]]:
    """Return :func:`event_payload` for building API response bodies."""
    return event_payload


@pytest.fixture
def stub_source() -> Callable[..., StubSource]:
    return StubSource

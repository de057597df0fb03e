"""Shared fixtures for calendar_grid tests."""

from typing import Any

import pytest

from calendar_grid.models.event import CalendarEvent


def make_event(
    id: str = "evt-1",
    start: str = "2025-01-10T09:00:00.000Z",
    end: str = "2025-01-10T10:00:00.000Z",
    **fields: Any,
) -> CalendarEvent:
    payload = {
        "id": id,
        "calendarId": "calendar-1",
        "title": f"Event {id}",
        "startTime": start,
        "endTime": end,
    }
    payload.update(fields)
    return CalendarEvent.from_payload(payload)


@pytest.fixture
def event_factory():
    """Build CalendarEvent objects from short time strings."""
    return make_event


@pytest.fixture
def base_event() -> CalendarEvent:
    return make_event()

"""Event reader backed by a YAML or JSON file."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import yaml

from ..models.event import CalendarEvent
from ..utils.date_utils import ensure_utc
from ..utils.exceptions import MalformedInputError
from .base import EventReader

logger = logging.getLogger(__name__)


class FileEventReader(EventReader):
    """Reads events from a file holding a list, or an ``events:`` key.

    JSON files load through the same path since YAML is a superset.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._events: Optional[list[CalendarEvent]] = None

    def _load(self) -> list[CalendarEvent]:
        if self._events is not None:
            return self._events

        try:
            with open(self.path) as f:
                raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise MalformedInputError(f"Cannot parse event file {self.path}: {e}") from e

        if isinstance(raw, dict):
            raw = raw.get("events", [])
        if raw is None:
            raw = []
        if not isinstance(raw, list):
            raise MalformedInputError(f"Event file {self.path} must hold a list of events")

        self._events = [CalendarEvent.from_payload(entry) for entry in raw]
        logger.debug(f"Loaded {len(self._events)} event(s) from {self.path}")
        return self._events

    def read_events(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> list[CalendarEvent]:
        events = self._load()
        if start_date:
            start_date = ensure_utc(start_date)
            events = [e for e in events if e.end_time >= start_date]
        if end_date:
            end_date = ensure_utc(end_date)
            events = [e for e in events if e.start_time <= end_date]
        return events

    def get_event(self, event_id: str) -> CalendarEvent:
        for event in self._load():
            if event.id == event_id:
                return event
        raise KeyError(event_id)

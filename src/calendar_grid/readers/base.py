"""Abstract base class for event readers."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from ..models.event import CalendarEvent


class EventReader(ABC):
    """Source of CalendarEvent records for the grid."""

    @abstractmethod
    def read_events(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> list[CalendarEvent]:
        """
        Read events overlapping a range.

        Args:
            start_date: Start of the range (None for unbounded)
            end_date: End of the range (None for unbounded)

        Returns:
            List of CalendarEvent objects

        Raises:
            MalformedInputError: If a record cannot be parsed
        """

    @abstractmethod
    def get_event(self, event_id: str) -> CalendarEvent:
        """
        Get a specific event by ID.

        Raises:
            KeyError: If no event has this ID
        """

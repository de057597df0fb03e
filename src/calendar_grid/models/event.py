"""Calendar event data model consumed by the scheduling core."""

from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from ..utils.date_utils import format_instant, parse_instant
from ..utils.exceptions import MalformedInputError
from .recurrence import RecurrenceType, parse_days_of_week


class SourceType(str, Enum):
    """Where an entry on the calendar comes from."""

    EVENT = "event"
    TASK = "task"
    OTHER = "other"


class CalendarEvent(BaseModel):
    """Calendar event as read by the layout and editing code.

    Accepts both camelCase (``startTime``) and snake_case (``start_time``)
    field names. Timestamps are normalized to UTC on construction.
    """

    # Identifiers
    id: str
    calendar_id: Optional[str] = None
    title: str = ""

    # Time properties
    start_time: datetime
    end_time: datetime
    all_day: bool = False

    # Classification
    source_type: SourceType = SourceType.EVENT
    read_only: bool = False

    # Recurrence
    recurrence_type: RecurrenceType = RecurrenceType.NONE
    recurrence_interval: int = 1
    recurrence_days_of_week: list[int] = Field(default_factory=list)
    recurrence_end_date: Optional[datetime] = None

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "frozen": True,
    }

    @field_validator("id", "calendar_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _parse_times(cls, value: Any) -> datetime:
        return parse_instant(value)

    @field_validator("recurrence_end_date", mode="before")
    @classmethod
    def _parse_recurrence_end(cls, value: Any) -> Optional[datetime]:
        if value is None or value == "":
            return None
        return parse_instant(value)

    @field_validator("source_type", mode="before")
    @classmethod
    def _normalize_source(cls, value: Any) -> SourceType:
        if value is None:
            return SourceType.EVENT
        if isinstance(value, SourceType):
            return value
        try:
            return SourceType(str(value).lower())
        except ValueError:
            return SourceType.OTHER

    @field_validator("recurrence_type", mode="before")
    @classmethod
    def _default_recurrence(cls, value: Any) -> Any:
        return RecurrenceType.NONE if value is None else value

    @field_validator("recurrence_interval", mode="before")
    @classmethod
    def _default_interval(cls, value: Any) -> Any:
        return 1 if value is None else value

    @field_validator("recurrence_days_of_week", mode="before")
    @classmethod
    def _parse_days(cls, value: Any) -> list[int]:
        return parse_days_of_week(value)

    @field_serializer("start_time", "end_time", "recurrence_end_date")
    def _serialize_times(self, value: Optional[datetime]) -> Optional[str]:
        return format_instant(value) if value is not None else None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "CalendarEvent":
        """
        Build an event from an API payload.

        Args:
            payload: Event dict with camelCase or snake_case keys

        Returns:
            CalendarEvent

        Raises:
            MalformedInputError: If the payload is missing fields or holds
                unparseable timestamps
        """
        if not isinstance(payload, dict):
            raise MalformedInputError(f"Expected an event mapping, got {type(payload).__name__}")
        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            raise MalformedInputError(
                f"Invalid event payload {payload.get('id', '?')}: {e.error_count()} error(s)"
            ) from e

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time

    @property
    def is_recurring(self) -> bool:
        return self.recurrence_type != RecurrenceType.NONE

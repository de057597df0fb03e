"""Recurrence rule model."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..utils.date_utils import parse_instant
from ..utils.exceptions import MalformedInputError


class RecurrenceType(str, Enum):
    """Recurrence type enumeration."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


def parse_days_of_week(value: Union[str, list, tuple, set, None]) -> list[int]:
    """
    Parse weekday numbers from a list or a ``"1,3,5"`` string.

    Non-numeric entries in a string are dropped. Range checking is left to
    the caller.
    """
    if value is None:
        return []
    if isinstance(value, str):
        days = []
        for part in value.split(","):
            part = part.strip()
            if part.lstrip("-").isdigit():
                days.append(int(part))
        return days
    return [int(day) for day in value]


class RecurrenceConfig(BaseModel):
    """Editable recurrence rule.

    Out-of-range ``interval`` and ``days_of_week`` values are accepted here
    and reported by ``validate_recurrence``.
    """

    type: RecurrenceType
    interval: int = 1
    days_of_week: list[int] = Field(default_factory=list)
    end_date: Optional[datetime] = None

    @field_validator("days_of_week", mode="before")
    @classmethod
    def _parse_days(cls, value: Any) -> list[int]:
        return parse_days_of_week(value)

    @field_validator("end_date", mode="before")
    @classmethod
    def _parse_end_date(cls, value: Any) -> Optional[datetime]:
        if value is None or value == "":
            return None
        return parse_instant(value)

    @classmethod
    def from_event_fields(
        cls,
        recurrence_type: Optional[str],
        recurrence_interval: Optional[int] = None,
        recurrence_end_date: Any = None,
        recurrence_days_of_week: Any = None,
    ) -> Optional["RecurrenceConfig"]:
        """
        Build a rule from the four ``recurrence*`` fields of an event.

        Args:
            recurrence_type: Type string, ``None`` or ``"none"`` for no rule
            recurrence_interval: Interval, missing or zero becomes 1
            recurrence_end_date: Optional end date
            recurrence_days_of_week: List or comma-separated weekday numbers

        Returns:
            RecurrenceConfig, or None when the event does not repeat

        Raises:
            MalformedInputError: If the type or any field cannot be parsed
        """
        if not recurrence_type or recurrence_type == RecurrenceType.NONE:
            return None

        try:
            days = [d for d in parse_days_of_week(recurrence_days_of_week) if 0 <= d <= 6]
            return cls(
                type=recurrence_type,
                interval=recurrence_interval or 1,
                days_of_week=days,
                end_date=recurrence_end_date,
            )
        except (ValidationError, ValueError, TypeError) as e:
            raise MalformedInputError(f"Invalid recurrence fields ({recurrence_type!r}): {e}") from e

    @classmethod
    def from_event(cls, event) -> Optional["RecurrenceConfig"]:
        """Build a rule from a CalendarEvent's recurrence fields."""
        return cls.from_event_fields(
            event.recurrence_type,
            event.recurrence_interval,
            event.recurrence_end_date,
            event.recurrence_days_of_week,
        )

    def to_event_fields(self) -> dict[str, Any]:
        """Convert to the ``recurrence_*`` fields of the persistence API."""
        if self.type == RecurrenceType.NONE:
            return {"recurrence_type": RecurrenceType.NONE.value, "recurrence_interval": 1}

        fields: dict[str, Any] = {
            "recurrence_type": self.type.value,
            "recurrence_interval": self.interval,
        }
        if self.end_date:
            fields["recurrence_end_date"] = self.end_date.strftime("%Y-%m-%d")
        if self.type == RecurrenceType.WEEKLY and self.days_of_week:
            fields["recurrence_days_of_week"] = ",".join(
                str(day) for day in sorted(set(self.days_of_week))
            )
        return fields

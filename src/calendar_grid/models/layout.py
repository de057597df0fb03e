"""Time grid geometry models."""

from dataclasses import dataclass

import pytz
from pydantic import BaseModel, Field, field_validator

from ..utils.date_utils import get_timezone
from .event import CalendarEvent

MINUTES_PER_DAY = 24 * 60


class LayoutConfig(BaseModel):
    """Pixel density and display timezone of a time grid.

    Passed explicitly to the positioner so that several grid densities
    (compact and expanded views) can be laid out side by side.
    """

    hour_height: float = Field(default=60, gt=0)
    min_event_minutes: int = Field(default=15, ge=1)
    timezone: str = "UTC"

    model_config = {"frozen": True}

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        get_timezone(value)
        return value

    @property
    def min_event_height(self) -> float:
        """Minimum block height, a quarter of an hour slot."""
        return self.hour_height / 4

    @property
    def day_height(self) -> float:
        return self.hour_height * 24

    @property
    def tz(self) -> pytz.BaseTzInfo:
        return get_timezone(self.timezone)


DEFAULT_LAYOUT = LayoutConfig()


@dataclass
class PositionedEvent:
    """An event segment placed on a single day of the grid."""

    event: CalendarEvent
    top: float  # px from midnight
    height: float  # px
    column: int = 0
    total_columns: int = 1
    start_minutes: int = 0
    end_minutes: int = 0

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

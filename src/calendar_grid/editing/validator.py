"""Validation of resize and drag edits on calendar events.

Business-rule violations come back as ``ErrorToken`` values, never as
exceptions; only malformed timestamps or arguments raise
``MalformedInputError``. Nothing here mutates the event, the caller
persists the returned partial update.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, field_serializer, model_validator
from pydantic.alias_generators import to_camel

from ..models.event import CalendarEvent, SourceType
from ..utils.date_utils import InstantLike, format_instant, parse_instant
from ..utils.exceptions import MalformedInputError

logger = logging.getLogger(__name__)

MINIMUM_DURATION = timedelta(minutes=15)
DEFAULT_SNAP_INTERVAL = 15

_RESIZABLE_SOURCES = {
    SourceType.EVENT: True,
    SourceType.TASK: False,
    SourceType.OTHER: True,
}


class ErrorToken(str, Enum):
    """Rejection reasons surfaced to the interaction layer."""

    NOT_RESIZABLE = "NOT_RESIZABLE"
    INVALID_ORDER = "INVALID_ORDER"  # start must be strictly before end
    DURATION_TOO_SHORT = "DURATION_TOO_SHORT"
    MALFORMED_INPUT = "MALFORMED_INPUT"


class ResizeEdge(str, Enum):
    """Edge of the event block being dragged."""

    LEFT = "left"  # start
    RIGHT = "right"  # end


class ResizeUpdate(BaseModel):
    """Partial update holding exactly one of start_time / end_time."""

    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "frozen": True,
    }

    @model_validator(mode="after")
    def _exactly_one_edge(self) -> "ResizeUpdate":
        if (self.start_time is None) == (self.end_time is None):
            raise ValueError("A resize update carries exactly one of start_time or end_time")
        return self

    @field_serializer("start_time", "end_time")
    def _serialize_times(self, value: Optional[datetime]) -> Optional[str]:
        return format_instant(value) if value is not None else None

    def to_payload(self) -> dict[str, str]:
        """Body for the event update endpoint, e.g. ``{"endTime": "...Z"}``."""
        return self.model_dump(by_alias=True, exclude_none=True)


@dataclass
class ResizeOutcome:
    """Result of a resize attempt: an update or a rejection token."""

    update: Optional[ResizeUpdate] = None
    error: Optional[ErrorToken] = None

    @property
    def ok(self) -> bool:
        return self.update is not None

    @classmethod
    def accepted(cls, update: ResizeUpdate) -> "ResizeOutcome":
        return cls(update=update)

    @classmethod
    def rejected(cls, error: ErrorToken) -> "ResizeOutcome":
        return cls(error=error)


def can_resize(event: CalendarEvent) -> bool:
    """Tasks and read-only events cannot be resized, everything else can."""
    if event.read_only:
        return False
    return _RESIZABLE_SOURCES[event.source_type]


def minimum_duration(event: CalendarEvent) -> timedelta:
    """Shortest duration an edit may leave an event with."""
    return MINIMUM_DURATION


def _effective_times(
    event: CalendarEvent,
    start: Optional[InstantLike],
    end: Optional[InstantLike],
) -> tuple[datetime, datetime]:
    return (
        parse_instant(start) if start is not None else event.start_time,
        parse_instant(end) if end is not None else event.end_time,
    )


def validate_order(
    event: CalendarEvent,
    start: Optional[InstantLike] = None,
    end: Optional[InstantLike] = None,
) -> Optional[ErrorToken]:
    """
    Check that start is strictly before end.

    Args:
        event: Event supplying the times not overridden
        start: Optional proposed start
        end: Optional proposed end

    Returns:
        ErrorToken.INVALID_ORDER if start >= end, otherwise None
    """
    effective_start, effective_end = _effective_times(event, start, end)
    if effective_start >= effective_end:
        return ErrorToken.INVALID_ORDER
    return None


def validate_duration(
    event: CalendarEvent,
    start: Optional[InstantLike] = None,
    end: Optional[InstantLike] = None,
) -> Optional[ErrorToken]:
    """
    Check that the event keeps at least ``minimum_duration``.

    Returns:
        ErrorToken.DURATION_TOO_SHORT if too short, otherwise None
    """
    effective_start, effective_end = _effective_times(event, start, end)
    if effective_end - effective_start < minimum_duration(event):
        return ErrorToken.DURATION_TOO_SHORT
    return None


def validate_event(event: CalendarEvent) -> Optional[ErrorToken]:
    """Validate the stored times of an event, order first."""
    return validate_order(event) or validate_duration(event)


def snap_to_grid(instant: InstantLike, interval_minutes: int = DEFAULT_SNAP_INTERVAL) -> datetime:
    """
    Round an instant to the nearest multiple of ``interval_minutes``.

    Only the minute component is rounded, seconds are dropped:
    12:07 -> 12:00 and 12:08 -> 12:15 on a 15 minute grid.

    Raises:
        MalformedInputError: If the interval is not between 1 and 60
    """
    if isinstance(interval_minutes, bool) or not isinstance(interval_minutes, int):
        raise MalformedInputError(f"Snap interval must be an integer, got {interval_minutes!r}")
    if not 1 <= interval_minutes <= 60:
        raise MalformedInputError(f"Snap interval must be between 1 and 60 minutes, got {interval_minutes}")

    instant = parse_instant(instant)
    hour = instant.replace(minute=0, second=0, microsecond=0)
    snapped = math.floor(instant.minute / interval_minutes + 0.5) * interval_minutes
    return hour + timedelta(minutes=snapped)


def build_resize_update(
    event: CalendarEvent,
    target: InstantLike,
    edge: Union[ResizeEdge, str],
    preserve_time: bool = True,
    snap_interval_minutes: int = DEFAULT_SNAP_INTERVAL,
) -> ResizeOutcome:
    """
    Compute the partial update for dragging one edge of an event.

    Args:
        event: Event being resized
        target: Instant under the pointer when the edge was dropped
        edge: "left" moves the start, "right" moves the end
        preserve_time: For all-day events, keep the edge's original time of
            day and only move the date; otherwise use the snapped target
        snap_interval_minutes: Time grid to snap the target to

    Returns:
        ResizeOutcome with a one-field update, or a rejection token

    Raises:
        MalformedInputError: If the target, edge or snap interval is malformed
    """
    if not can_resize(event):
        logger.debug(f"Resize rejected for {event.id}: {event.source_type.value} not resizable")
        return ResizeOutcome.rejected(ErrorToken.NOT_RESIZABLE)

    try:
        edge = ResizeEdge(edge)
    except ValueError as e:
        raise MalformedInputError(f"Unknown resize edge: {edge!r}") from e

    target = parse_instant(target)
    proposed = snap_to_grid(target, snap_interval_minutes)

    original = event.start_time if edge == ResizeEdge.LEFT else event.end_time
    if event.all_day and preserve_time:
        # Raw drop date, the snapped instant may roll past midnight
        proposed = target.replace(
            hour=original.hour,
            minute=original.minute,
            second=original.second,
            microsecond=original.microsecond,
        )

    if edge == ResizeEdge.LEFT:
        start, end = proposed, event.end_time
    else:
        start, end = event.start_time, proposed

    error = validate_order(event, start, end) or validate_duration(event, start, end)
    if error:
        logger.debug(f"Resize rejected for {event.id}: {error.value} ({format_instant(start)} - {format_instant(end)})")
        return ResizeOutcome.rejected(error)

    if edge == ResizeEdge.LEFT:
        return ResizeOutcome.accepted(ResizeUpdate(start_time=proposed))
    return ResizeOutcome.accepted(ResizeUpdate(end_time=proposed))

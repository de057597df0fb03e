"""Date and time utilities for Calendar Grid.

Every instant handled by the core is a timezone-aware UTC datetime. The
display timezone only comes into play when a calendar day is turned into
a pair of instants (see ``day_bounds``).
"""

from datetime import date, datetime, time, timedelta
from typing import Union

import pytz

from .exceptions import MalformedInputError

InstantLike = Union[str, datetime, date]


def ensure_utc(dt: datetime) -> datetime:
    """
    Ensure datetime is in UTC.

    Args:
        dt: Datetime to convert, naive values are taken as UTC

    Returns:
        UTC datetime
    """
    if dt.tzinfo is None:
        return pytz.utc.localize(dt)
    return dt.astimezone(pytz.utc)


def parse_instant(value: InstantLike) -> datetime:
    """
    Parse an ISO-8601 string, date or datetime into a UTC instant.

    Args:
        value: ``2025-01-10T09:00:00.000Z``-style string, datetime or date

    Returns:
        Timezone-aware UTC datetime

    Raises:
        MalformedInputError: If the value is not a usable timestamp
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return pytz.utc.localize(datetime.combine(value, time.min))
    if not isinstance(value, str):
        raise MalformedInputError(f"Expected an ISO-8601 timestamp, got {type(value).__name__}")

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise MalformedInputError(f"Invalid timestamp: {value!r}") from e
    return ensure_utc(parsed)


def format_instant(dt: datetime) -> str:
    """Format an instant as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    utc = ensure_utc(dt)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def get_timezone(name: str) -> pytz.BaseTzInfo:
    """
    Resolve a timezone name.

    Raises:
        MalformedInputError: If the name is unknown
    """
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError as e:
        raise MalformedInputError(f"Unknown timezone: {name}") from e


def day_bounds(day: date, tz: pytz.BaseTzInfo = pytz.utc) -> tuple[datetime, datetime]:
    """
    Get the instants at which a calendar day starts and the next one starts.

    Args:
        day: Calendar day in the display timezone
        tz: Display timezone

    Returns:
        Tuple of (start_of_day, start_of_next_day) as UTC datetimes
    """
    if isinstance(day, datetime):
        day = day.date()
    start = tz.localize(datetime.combine(day, time.min))
    next_start = tz.localize(datetime.combine(day + timedelta(days=1), time.min))
    return start.astimezone(pytz.utc), next_start.astimezone(pytz.utc)

"""Recurrence expansion and summaries for event forms.

Expansion works on UTC instants: every occurrence keeps the time of day
of the start instant, and the end date is compared by calendar day so an
occurrence falling on the end date is still included.
"""

import logging
from datetime import datetime
from enum import Enum
from itertools import count
from typing import Callable, Iterator, Optional

from dateutil.relativedelta import relativedelta
from dateutil.rrule import DAILY, FR, MO, SA, SU, TH, TU, WE, WEEKLY, rrule

from ..models.recurrence import RecurrenceConfig, RecurrenceType
from ..utils.date_utils import InstantLike, ensure_utc, parse_instant
from ..utils.exceptions import RecurrenceConfigError

logger = logging.getLogger(__name__)

MIN_INTERVAL = 1
MAX_INTERVAL = 999
DEFAULT_LIMIT = 10

WEEKDAY_KEYS = ["sun", "mon", "tue", "wed", "thu", "fri", "sat"]

# Indexed by weekday number, 0=Sunday
WEEKDAYS = [SU, MO, TU, WE, TH, FR, SA]

_TYPE_LABELS = {
    RecurrenceType.DAILY: "daily",
    RecurrenceType.WEEKLY: "weekly",
    RecurrenceType.MONTHLY: "monthly",
    RecurrenceType.YEARLY: "yearly",
}

_UNIT_LABELS = {
    RecurrenceType.DAILY: "days",
    RecurrenceType.WEEKLY: "weeks",
    RecurrenceType.MONTHLY: "months",
    RecurrenceType.YEARLY: "years",
}


class RecurrenceError(str, Enum):
    """Reasons a recurrence rule cannot be expanded."""

    INVALID_TYPE = "INVALID_TYPE"
    INVALID_INTERVAL = "INVALID_INTERVAL"
    INVALID_DAYS_OF_WEEK = "INVALID_DAYS_OF_WEEK"
    END_DATE_IN_PAST = "END_DATE_IN_PAST"


def validate_recurrence(
    config: RecurrenceConfig,
    now: Optional[datetime] = None,
) -> Optional[RecurrenceError]:
    """
    Check a recurrence rule before expanding or saving it.

    Args:
        config: Rule to check
        now: Reference instant; when given, an end date before it is rejected

    Returns:
        RecurrenceError token, or None if the rule is valid
    """
    if config.type == RecurrenceType.NONE:
        return RecurrenceError.INVALID_TYPE

    if not MIN_INTERVAL <= config.interval <= MAX_INTERVAL:
        return RecurrenceError.INVALID_INTERVAL

    if any(not 0 <= day <= 6 for day in config.days_of_week):
        return RecurrenceError.INVALID_DAYS_OF_WEEK

    if now is not None and config.end_date and config.end_date < ensure_utc(now):
        return RecurrenceError.END_DATE_IN_PAST

    return None


def _rule_candidates(start: datetime, config: RecurrenceConfig) -> Iterator[datetime]:
    if config.type == RecurrenceType.DAILY:
        occurrences = rrule(DAILY, dtstart=start, interval=config.interval)
    elif config.days_of_week:
        occurrences = rrule(
            WEEKLY,
            dtstart=start,
            interval=config.interval,
            byweekday=[WEEKDAYS[day] for day in sorted(set(config.days_of_week))],
            wkst=SU,
        )
    else:
        occurrences = rrule(WEEKLY, dtstart=start, interval=config.interval)

    # rrule drops sub-second precision from dtstart
    for occurrence in occurrences:
        yield occurrence.replace(microsecond=start.microsecond)


def _candidates(start: datetime, config: RecurrenceConfig) -> Iterator[datetime]:
    """Yield occurrence candidates in chronological order until datetime.max."""
    try:
        if config.type in (RecurrenceType.DAILY, RecurrenceType.WEEKLY):
            yield from _rule_candidates(start, config)

        elif config.type == RecurrenceType.MONTHLY:
            for k in count():
                yield start + relativedelta(months=k * config.interval)

        elif config.type == RecurrenceType.YEARLY:
            for k in count():
                yield start + relativedelta(years=k * config.interval)
    except (OverflowError, ValueError):
        # The next candidate would fall past year 9999
        return


def next_occurrences(
    start_date: InstantLike,
    config: RecurrenceConfig,
    limit: int = DEFAULT_LIMIT,
) -> list[datetime]:
    """
    Calculate the upcoming occurrences of a recurring event.

    Args:
        start_date: Start of the first occurrence
        config: Recurrence rule
        limit: Maximum number of occurrences to return

    Returns:
        Up to ``limit`` UTC datetimes, fewer when the end date is reached

    Raises:
        RecurrenceConfigError: If the rule fails ``validate_recurrence``
        MalformedInputError: If ``start_date`` is not a valid timestamp
    """
    error = validate_recurrence(config)
    if error:
        raise RecurrenceConfigError(error.value)

    start = parse_instant(start_date)
    last_day = config.end_date.date() if config.end_date else None

    occurrences: list[datetime] = []
    if limit < 1:
        return occurrences

    for candidate in _candidates(start, config):
        if last_day and candidate.date() > last_day:
            break
        occurrences.append(candidate)
        if len(occurrences) >= limit:
            break

    logger.debug(f"Expanded {config.type.value} rule from {start.isoformat()}: {len(occurrences)} occurrence(s)")
    return occurrences


def describe(
    config: RecurrenceConfig,
    translate: Callable[[str], str],
    date_format: str = "%Y-%m-%d",
) -> str:
    """
    Summarize a recurrence rule, e.g. "Weekly On Mon, Wed And Fri".

    Args:
        config: Recurrence rule
        translate: Maps ``calendar.*`` translation keys to display text
        date_format: strftime format for the end date

    Returns:
        Human-readable description
    """
    if config.type == RecurrenceType.NONE:
        return translate("calendar.recurrence.none")

    if config.interval == 1:
        text = translate(f"calendar.recurrence.{_TYPE_LABELS[config.type]}")
    else:
        text = (
            f"{translate('calendar.recurrence.interval')} {config.interval} "
            f"{translate(f'calendar.recurrence.{_UNIT_LABELS[config.type]}')}"
        )

    if config.type == RecurrenceType.WEEKLY and config.days_of_week:
        labels = [
            translate(f"calendar.weekdays.{WEEKDAY_KEYS[day]}")
            for day in sorted(set(config.days_of_week))
            if 0 <= day <= 6
        ]
        on = translate("calendar.recurrence.on")
        conjunction = translate("calendar.recurrence.and")
        if len(labels) == 1:
            text += f" {on} {labels[0]}"
        elif len(labels) == 2:
            text += f" {on} {labels[0]} {conjunction} {labels[1]}"
        elif labels:
            text += f" {on} {', '.join(labels[:-1])} {conjunction} {labels[-1]}"

    if config.end_date:
        text += f" {translate('calendar.recurrence.until')} {config.end_date.strftime(date_format)}"

    return text

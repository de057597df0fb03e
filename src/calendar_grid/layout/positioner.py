"""Time grid positioning for Day and Week views.

Turns the timed events of a day into absolute geometry (top, height) and
side-by-side columns for events that overlap, in the style of the usual
calendar apps:

1. each event is clamped to the day, so a multi-day event yields one
   segment per day it touches;
2. events are sorted by start, longer events first on ties;
3. a greedy pass puts every event in the leftmost column that is free;
4. a sweep splits the day into overlap groups and every member of a group
   gets the group's column count, so distant overlaps elsewhere in the day
   do not narrow unrelated events.
"""

import logging
from datetime import date, datetime
from typing import Iterable, Optional

from ..models.event import CalendarEvent
from ..models.layout import DEFAULT_LAYOUT, MINUTES_PER_DAY, LayoutConfig, PositionedEvent
from ..utils.date_utils import day_bounds

logger = logging.getLogger(__name__)


def _overlaps_day(event: CalendarEvent, day_start: datetime, next_day_start: datetime) -> bool:
    if event.start_time >= next_day_start:
        return False
    # Zero-length events sitting on the day still count
    return event.end_time > day_start or event.start_time >= day_start


def visible_events_for_day(
    events: Iterable[CalendarEvent],
    day: date,
    config: LayoutConfig = DEFAULT_LAYOUT,
) -> list[CalendarEvent]:
    """
    Get the timed events that show up on a day.

    All-day events are left out, they belong in the all-day lane
    (see ``all_day_events_for_day``).

    Args:
        events: Candidate events
        day: Calendar day in the display timezone
        config: Layout configuration (only the timezone is used)

    Returns:
        Events overlapping the day, in input order
    """
    day_start, next_day_start = day_bounds(day, config.tz)
    return [
        event
        for event in events
        if not event.all_day and _overlaps_day(event, day_start, next_day_start)
    ]


def all_day_events_for_day(
    events: Iterable[CalendarEvent],
    day: date,
    config: LayoutConfig = DEFAULT_LAYOUT,
) -> list[CalendarEvent]:
    """Get the all-day events covering a day, in input order."""
    day_start, next_day_start = day_bounds(day, config.tz)
    return [
        event
        for event in events
        if event.all_day and _overlaps_day(event, day_start, next_day_start)
    ]


def _minutes_into_day(instant: datetime, day_start: datetime, next_day_start: datetime) -> int:
    """Minutes elapsed since the start of the day, clamped to [0, 1440].

    Elapsed time keeps real durations intact on daylight saving days.
    """
    if instant < day_start:
        return 0
    if instant >= next_day_start:
        return MINUTES_PER_DAY
    elapsed = int((instant - day_start).total_seconds() // 60)
    return min(elapsed, MINUTES_PER_DAY)


def _overlap_groups(positions: list[PositionedEvent]) -> list[list[PositionedEvent]]:
    """Split start-sorted positions into connected overlap groups."""
    if not positions:
        return []

    groups: list[list[PositionedEvent]] = []
    current = [positions[0]]
    group_end = positions[0].end_minutes

    for pos in positions[1:]:
        if pos.start_minutes < group_end:
            current.append(pos)
            group_end = max(group_end, pos.end_minutes)
        else:
            groups.append(current)
            current = [pos]
            group_end = pos.end_minutes
    groups.append(current)

    return groups


def layout_day(
    events: Iterable[CalendarEvent],
    day: date,
    config: LayoutConfig = DEFAULT_LAYOUT,
) -> list[PositionedEvent]:
    """
    Position the timed events of one day.

    Args:
        events: Events to place, normally the output of ``visible_events_for_day``
        day: Calendar day in the display timezone
        config: Grid density and display timezone

    Returns:
        PositionedEvent list sorted by start minute, longest first on ties
    """
    events = list(events)
    if not events:
        return []

    day_start, next_day_start = day_bounds(day, config.tz)

    positions = []
    for event in events:
        start_minutes = _minutes_into_day(event.start_time, day_start, next_day_start)
        end_minutes = _minutes_into_day(event.end_time, day_start, next_day_start)
        duration = max(end_minutes - start_minutes, config.min_event_minutes)

        positions.append(
            PositionedEvent(
                event=event,
                top=(start_minutes / 60) * config.hour_height,
                height=max((duration / 60) * config.hour_height, config.min_event_height),
                start_minutes=start_minutes,
                end_minutes=start_minutes + duration,
            )
        )

    positions.sort(key=lambda p: (p.start_minutes, -p.duration_minutes))

    # Greedy column packing, each column remembers where its last event ends
    column_ends: list[int] = []
    for pos in positions:
        for index, column_end in enumerate(column_ends):
            if column_end <= pos.start_minutes:
                pos.column = index
                column_ends[index] = pos.end_minutes
                break
        else:
            pos.column = len(column_ends)
            column_ends.append(pos.end_minutes)

    # Columns must be assigned before group widths can be computed
    groups = _overlap_groups(positions)
    for group in groups:
        total = max(pos.column for pos in group) + 1
        for pos in group:
            pos.total_columns = total

    logger.debug(
        f"Laid out {len(positions)} event(s) on {day}: "
        f"{len(column_ends)} column(s), {len(groups)} group(s)"
    )
    return positions


def layout_days(
    events: Iterable[CalendarEvent],
    days: Iterable[date],
    config: Optional[LayoutConfig] = None,
) -> dict[date, list[PositionedEvent]]:
    """
    Lay out several days at once, e.g. the seven columns of a week view.

    Multi-day events are sliced into one segment per day.

    Args:
        events: All events in the visible range
        days: Days to lay out
        config: Layout configuration (defaults to a 60px/hour UTC grid)

    Returns:
        Dict of day -> positioned events for that day
    """
    config = config or DEFAULT_LAYOUT
    events = list(events)
    return {
        day: layout_day(visible_events_for_day(events, day, config), day, config)
        for day in days
    }

"""Tests for the time grid positioner."""

from datetime import date
from itertools import combinations

import pytest

from calendar_grid.layout.positioner import (
    all_day_events_for_day,
    layout_day,
    layout_days,
    visible_events_for_day,
)
from calendar_grid.models.layout import LayoutConfig

DAY = date(2025, 1, 10)


def _at(hhmm: str, day: str = "2025-01-10") -> str:
    return f"{day}T{hhmm}:00.000Z"


def _by_id(positions):
    return {p.event.id: p for p in positions}


# ---------------------------------------------------------------------------
# Visibility
# ---------------------------------------------------------------------------

class TestVisibleEvents:
    def test_excludes_all_day_events(self, event_factory):
        timed = event_factory("timed")
        all_day = event_factory("allday", _at("00:00"), "2025-01-10T23:59:59.999Z", allDay=True)

        assert visible_events_for_day([timed, all_day], DAY) == [timed]
        assert all_day_events_for_day([timed, all_day], DAY) == [all_day]

    def test_excludes_events_on_other_days(self, event_factory):
        today = event_factory("today")
        yesterday = event_factory("yesterday", _at("09:00", "2025-01-09"), _at("10:00", "2025-01-09"))
        tomorrow = event_factory("tomorrow", _at("00:00", "2025-01-11"), _at("01:00", "2025-01-11"))

        assert visible_events_for_day([today, yesterday, tomorrow], DAY) == [today]

    def test_includes_event_spanning_the_day(self, event_factory):
        spanning = event_factory("span", _at("22:00", "2025-01-09"), _at("02:00", "2025-01-11"))
        assert visible_events_for_day([spanning], DAY) == [spanning]

    def test_event_ending_at_midnight_is_not_on_next_day(self, event_factory):
        late = event_factory("late", _at("22:00", "2025-01-09"), _at("00:00"))
        assert visible_events_for_day([late], DAY) == []
        assert visible_events_for_day([late], date(2025, 1, 9)) == [late]

    def test_uses_display_timezone(self, event_factory):
        # 23:30 UTC on the 9th is 00:30 on the 10th in Zurich
        event = event_factory("tz", "2025-01-09T23:30:00Z", "2025-01-10T00:30:00Z")
        zurich = LayoutConfig(timezone="Europe/Zurich")

        assert visible_events_for_day([event], DAY, zurich) == [event]
        assert visible_events_for_day([event], date(2025, 1, 9), zurich) == []


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

class TestGeometry:
    def test_empty_day(self):
        assert layout_day([], DAY) == []

    def test_top_and_height(self, event_factory):
        [pos] = layout_day([event_factory("a", _at("09:00"), _at("10:30"))], DAY)

        assert pos.top == 540

    def test_fall_back_day_uses_elapsed_minutes(self, event_factory):
        new_york = LayoutConfig(timezone="America/New_York")
        # 01:00 EDT to 01:00 EST, one real hour
        event = event_factory("a", "2024-11-03T05:00:00Z", "2024-11-03T06:00:00Z")

        [pos] = layout_day([event], date(2024, 11, 3), new_york)

        assert (pos.start_minutes, pos.end_minutes) == (60, 120)
        assert pos.top == 60
        assert pos.height == 60

    def test_spring_forward_day_uses_elapsed_minutes(self, event_factory):
        new_york = LayoutConfig(timezone="America/New_York")
        # 01:30 EST to 03:30 EDT, one real hour
        event = event_factory("a", "2024-03-10T06:30:00Z", "2024-03-10T07:30:00Z")

        [pos] = layout_day([event], date(2024, 3, 10), new_york)

        assert pos.top == 90
        assert pos.height == 60

    def test_long_day_is_clamped_to_grid(self, event_factory):
        new_york = LayoutConfig(timezone="America/New_York")
        # 25-hour day, the last local hour falls past the grid
        event = event_factory("late", "2024-11-04T03:30:00Z", "2024-11-04T04:30:00Z")

        [pos] = layout_day([event], date(2024, 11, 3), new_york)

        assert pos.end_minutes == 1440
        assert pos.top + pos.height <= new_york.day_height
        assert pos.height == 90
        assert pos.column == 0
        assert pos.total_columns == 1

    def test_short_event_gets_minimum_height(self, event_factory):
        [pos] = layout_day([event_factory("a", _at("09:00"), _at("09:05"))], DAY)

        assert pos.height == 15
        assert pos.end_minutes == 9 * 60 + 15

    def test_minimum_duration_does_not_touch_event(self, event_factory):
        event = event_factory("a", _at("09:00"), _at("09:05"))
        layout_day([event], DAY)
        assert event.end_time.minute == 5

    def test_multi_day_event_is_clamped_per_day(self, event_factory):
        overnight = event_factory("night", _at("22:00", "2025-01-09"), _at("02:00"))

        [first] = layout_day([overnight], date(2025, 1, 9))
        [second] = layout_day([overnight], DAY)

        assert (first.start_minutes, first.end_minutes) == (22 * 60, 1440)
        assert first.height == 120
        assert (second.start_minutes, second.end_minutes) == (0, 120)
        assert second.top == 0

    def test_custom_hour_height(self, event_factory):
        compact = LayoutConfig(hour_height=30)
        [pos] = layout_day([event_factory("a", _at("09:00"), _at("09:05"))], DAY, compact)

        assert pos.top == 270
        assert pos.height == 7.5
        assert compact.day_height == 720

    def test_display_timezone_shifts_geometry(self, event_factory):
        zurich = LayoutConfig(timezone="Europe/Zurich")
        [pos] = layout_day([event_factory("a", "2025-01-10T08:00:00Z", "2025-01-10T09:00:00Z")], DAY, zurich)

        assert pos.top == 540


# ---------------------------------------------------------------------------
# Columns and overlap groups
# ---------------------------------------------------------------------------

class TestColumns:
    def test_back_to_back_events_share_a_column(self, event_factory):
        positions = layout_day(
            [
                event_factory("a", _at("09:00"), _at("10:00")),
                event_factory("b", _at("10:00"), _at("11:00")),
            ],
            DAY,
        )
        for pos in positions:
            assert pos.column == 0
            assert pos.total_columns == 1

    def test_three_way_overlap(self, event_factory):
        positions = _by_id(
            layout_day(
                [
                    event_factory("a", _at("09:00"), _at("10:30")),
                    event_factory("b", _at("10:00"), _at("11:00")),
                    event_factory("c", _at("10:15"), _at("10:45")),
                ],
                DAY,
            )
        )

        assert {p.column for p in positions.values()} == {0, 1, 2}
        assert all(p.total_columns == 3 for p in positions.values())

    def test_longer_event_claims_left_column_on_tie(self, event_factory):
        positions = _by_id(
            layout_day(
                [
                    event_factory("short", _at("09:00"), _at("09:30")),
                    event_factory("long", _at("09:00"), _at("11:00")),
                ],
                DAY,
            )
        )

        assert positions["long"].column == 0
        assert positions["short"].column == 1

    def test_output_sorted_by_start(self, event_factory):
        positions = layout_day(
            [
                event_factory("late", _at("15:00"), _at("16:00")),
                event_factory("early", _at("08:00"), _at("09:00")),
            ],
            DAY,
        )
        assert [p.event.id for p in positions] == ["early", "late"]

    def test_distant_groups_are_sized_independently(self, event_factory):
        positions = _by_id(
            layout_day(
                [
                    event_factory("a", _at("09:00"), _at("10:00")),
                    event_factory("b", _at("09:30"), _at("10:30")),
                    event_factory("c", _at("14:00"), _at("15:00")),
                ],
                DAY,
            )
        )

        assert positions["a"].total_columns == 2
        assert positions["b"].total_columns == 2
        assert positions["c"].column == 0
        assert positions["c"].total_columns == 1

    def test_chained_group_reuses_freed_column(self, event_factory):
        # a overlaps b, b overlaps c, a and c do not overlap
        positions = _by_id(
            layout_day(
                [
                    event_factory("a", _at("09:00"), _at("10:00")),
                    event_factory("b", _at("09:30"), _at("11:00")),
                    event_factory("c", _at("10:00"), _at("11:30")),
                ],
                DAY,
            )
        )

        assert positions["a"].column == 0
        assert positions["b"].column == 1
        assert positions["c"].column == 0
        assert {p.total_columns for p in positions.values()} == {2}

    def test_overlapping_pairs_never_share_a_column(self, event_factory):
        spans = [
            ("08:00", "09:30"), ("08:15", "08:45"), ("08:30", "10:00"),
            ("09:00", "09:15"), ("09:45", "11:00"), ("10:00", "10:30"),
            ("12:00", "13:00"), ("12:30", "12:45"), ("16:00", "16:05"),
        ]
        events = [event_factory(f"e{i}", _at(s), _at(e)) for i, (s, e) in enumerate(spans)]
        positions = layout_day(events, DAY)

        for p, q in combinations(positions, 2):
            if p.start_minutes < q.end_minutes and q.start_minutes < p.end_minutes:
                assert p.column != q.column
                assert p.total_columns == q.total_columns
        for p in positions:
            assert p.column < p.total_columns


class TestLayoutDays:
    def test_week_slices_multi_day_event(self, event_factory):
        days = [date(2025, 1, 9), date(2025, 1, 10), date(2025, 1, 11)]
        overnight = event_factory("night", _at("22:00", "2025-01-09"), _at("02:00"))
        meeting = event_factory("meeting", _at("09:00"), _at("10:00"))

        result = layout_days([overnight, meeting], days)

        assert [p.event.id for p in result[days[0]]] == ["night"]
        assert [p.event.id for p in result[days[1]]] == ["night", "meeting"]
        assert result[days[2]] == []

    @pytest.mark.parametrize("hour_height", [30, 60, 120])
    def test_grid_densities_coexist(self, event_factory, hour_height):
        event = event_factory("a", _at("06:00"), _at("07:00"))
        [pos] = layout_days([event], [DAY], LayoutConfig(hour_height=hour_height))[DAY]
        assert pos.top == 6 * hour_height
        assert pos.height == hour_height

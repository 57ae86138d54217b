"""Tests for week_range module."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from timesheet_insights.week_range import (
    MONDAY,
    SUNDAY,
    as_date,
    can_advance_month,
    can_advance_week,
    is_current_month,
    is_current_week,
    month_bounds,
    shift_month,
    shift_week,
    week_range,
)


class TestWeekRange:
    """Test suite for week_range.

    Categories:
    1. Sunday-start weeks (timesheet review)
    2. Monday-start weeks (month grid)
    3. Input handling - datetimes, invalid conventions
    """

    def test_sunday_week_of_a_wednesday(self) -> None:
        """Verifies the review week around Wednesday 2024-01-10.

        Business context:
        The weekly review queries sessions between these two dates.
        An off-by-one drops Saturday or Sunday work.

        Arrangement:
        Wednesday 2024-01-10.

        Action:
        Call week_range() with the default Sunday start.

        Assertion Strategy:
        Start is Sunday Jan 7, end is Saturday Jan 13.
        """
        period = week_range(date(2024, 1, 10))

        assert period.start == date(2024, 1, 7)
        assert period.end == date(2024, 1, 13)
        assert period.start.weekday() == 6

    def test_sunday_anchor_starts_its_own_week(self) -> None:
        assert week_range(date(2024, 1, 7)).start == date(2024, 1, 7)

    def test_saturday_anchor_ends_its_week(self) -> None:
        period = week_range(date(2024, 1, 13))
        assert period.start == date(2024, 1, 7)
        assert period.end == date(2024, 1, 13)

    def test_monday_week(self) -> None:
        period = week_range(date(2024, 1, 10), MONDAY)

        assert period.start == date(2024, 1, 8)
        assert period.end == date(2024, 1, 14)

    def test_monday_week_of_a_sunday_looks_back(self) -> None:
        """With Monday-start weeks, a Sunday is the last day of its week."""
        period = week_range(date(2024, 1, 14), MONDAY)
        assert period.start == date(2024, 1, 8)

    def test_week_crossing_year_boundary(self) -> None:
        period = week_range(date(2024, 1, 2))

        assert period.start == date(2023, 12, 31)
        assert period.end == date(2024, 1, 6)

    def test_datetime_is_truncated(self) -> None:
        period = week_range(datetime(2024, 1, 13, 23, 59))
        assert period.end == date(2024, 1, 13)

    def test_range_is_always_seven_days(self) -> None:
        for day in range(1, 32):
            period = week_range(date(2024, 1, day))
            assert (period.end - period.start).days == 6
            assert period.contains(date(2024, 1, day))

    def test_invalid_week_start_raises(self) -> None:
        """Verifies unsupported conventions are rejected.

        Business context:
        A typo like "Sunday" is a programming error, not bad data, so it
        should fail loudly rather than fall back silently.
        """
        with pytest.raises(ValueError, match="week_starts_on"):
            week_range(date(2024, 1, 10), "Sunday")


class TestWeekNavigation:
    """Tests for is_current_week, can_advance_week and shift_week."""

    def test_cannot_advance_from_current_week(self) -> None:
        """Verifies the next-week button is disabled in the current week.

        Business context:
        Timesheets for future weeks cannot exist.

        Arrangement:
        now = 2024-01-10, viewing the same week.

        Action:
        Call can_advance_week().

        Assertion Strategy:
        False.
        """
        now = date(2024, 1, 10)
        assert can_advance_week(date(2024, 1, 10), now) is False

    def test_can_advance_from_previous_week(self) -> None:
        now = date(2024, 1, 10)
        assert can_advance_week(date(2024, 1, 3), now) is True

    def test_cannot_advance_from_future_week(self) -> None:
        assert can_advance_week(date(2024, 1, 20), date(2024, 1, 10)) is False

    def test_advance_respects_week_start(self) -> None:
        """Sunday Jan 7 is in the previous Monday-week of Jan 10."""
        now = date(2024, 1, 10)

        assert can_advance_week(date(2024, 1, 7), now, SUNDAY) is False
        assert can_advance_week(date(2024, 1, 7), now, MONDAY) is True

    def test_is_current_week(self) -> None:
        now = datetime(2024, 1, 10, 9, 0)

        assert is_current_week(date(2024, 1, 7), now) is True
        assert is_current_week(date(2024, 1, 13), now) is True
        assert is_current_week(date(2024, 1, 6), now) is False

    def test_shift_week(self) -> None:
        assert shift_week(date(2024, 1, 10), 1) == date(2024, 1, 17)
        assert shift_week(datetime(2024, 1, 10, 8, 0), -2) == date(2023, 12, 27)

    def test_as_date_passes_dates_through(self) -> None:
        assert as_date(date(2024, 1, 10)) == date(2024, 1, 10)


class TestMonthNavigation:
    """Tests for month helpers used by the monthly timesheet."""

    def test_month_bounds_leap_february(self) -> None:
        assert month_bounds(date(2024, 2, 14)) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_month_bounds_december(self) -> None:
        assert month_bounds(date(2023, 12, 5)) == (date(2023, 12, 1), date(2023, 12, 31))

    def test_shift_month_clamps_day(self) -> None:
        """Jan 31 plus one month is the last day of February."""
        assert shift_month(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert shift_month(date(2023, 1, 31), 1) == date(2023, 2, 28)

    def test_shift_month_across_years(self) -> None:
        assert shift_month(date(2024, 1, 15), -1) == date(2023, 12, 15)
        assert shift_month(date(2023, 11, 15), 3) == date(2024, 2, 15)

    def test_is_current_month(self) -> None:
        now = datetime(2024, 2, 1, 0, 5)

        assert is_current_month(date(2024, 2, 29), now) is True
        assert is_current_month(date(2024, 1, 31), now) is False
        assert is_current_month(date(2023, 2, 1), now) is False

    def test_can_advance_month(self) -> None:
        """Previous months can advance; the current month cannot."""
        now = date(2024, 2, 1)

        assert can_advance_month(date(2024, 1, 15), now) is True
        assert can_advance_month(date(2024, 2, 15), now) is False
        assert can_advance_month(date(2023, 12, 31), now) is True

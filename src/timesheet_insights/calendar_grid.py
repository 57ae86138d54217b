"""
Calendar grids annotated with sessions.

PURPOSE: Build the day cells behind the monthly and weekly timesheet views.
AI CONTEXT: Pure transformation - "today" is injected, sessions are not mutated.

GRID SHAPE:
- Month grid: the month padded with adjacent-month days to whole weeks,
  so its length is always a multiple of 7 (28-42 days)
- Week grid: exactly seven days

BUCKETING:
A session belongs to the cell whose date equals the session's date-only
key. Clock-in/clock-out times are not consulted, so a session crossing
midnight stays on the day it was filed under.

USAGE:
    days = build_month_grid(date(2024, 2, 1), sessions, MONDAY, today=date(2024, 2, 14))
    working = working_days_in_month(date(2024, 2, 1))   # 21
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta

from .config import Config
from .models import CalendarDay, Session
from .week_range import as_date, month_bounds, week_range


def _bucket_by_date(sessions: Iterable[Session]) -> dict[date, list[Session]]:
    buckets: dict[date, list[Session]] = {}
    for session in sessions:
        if session.date is not None:
            buckets.setdefault(session.date, []).append(session)
    return buckets


def _build_days(
    start: date,
    end: date,
    buckets: dict[date, list[Session]],
    today: date,
    in_period: tuple[date, date],
) -> list[CalendarDay]:
    days = []
    current = start
    while current <= end:
        day_sessions = tuple(buckets.get(current, ()))
        days.append(
            CalendarDay(
                date=current,
                is_current_period=in_period[0] <= current <= in_period[1],
                is_today=current == today,
                sessions=day_sessions,
                total_minutes=sum(max(s.total_minutes, 0) for s in day_sessions),
            )
        )
        current += timedelta(days=1)
    return days


def build_month_grid(
    anchor_month: date | datetime,
    sessions: Iterable[Session],
    week_starts_on: str,
    today: date | datetime,
) -> list[CalendarDay]:
    """
    Build the padded day grid for a calendar month.

    The range starts on the week-start day on/before the 1st of the month
    and ends on the last day of the week containing the month's last day.
    Each cell carries the sessions dated that day and their total minutes,
    with negative counts read as 0 like everywhere else in the core.

    Business context: The monthly timesheet shows a manager one user's
    month at a glance, with adjacent-month filler days greyed out.

    Args:
        anchor_month: Any day in the month to render.
        sessions: Sessions to place on the grid. Sessions outside the
            padded range are ignored.
        week_starts_on: "sunday" or "monday". Required because different
            views use different conventions.
        today: Current date, injected by the caller, used for is_today.

    Returns:
        List of CalendarDay in date order; len(result) % 7 == 0.

    Raises:
        ValueError: If week_starts_on is not a supported convention.

    Example:
        >>> days = build_month_grid(date(2024, 2, 1), [], "sunday", date(2024, 2, 14))
        >>> len(days), days[0].date, days[-1].date
        (35, datetime.date(2024, 1, 28), datetime.date(2024, 3, 2))
    """
    first, last = month_bounds(anchor_month)
    start = week_range(first, week_starts_on).start
    end = week_range(last, week_starts_on).end
    return _build_days(start, end, _bucket_by_date(sessions), as_date(today), (first, last))


def build_week_grid(
    anchor: date | datetime,
    sessions: Iterable[Session],
    week_starts_on: str,
    today: date | datetime,
) -> list[CalendarDay]:
    """
    Build the seven day cells of the week containing ``anchor``.

    Every cell is in the current period. Used by the weekly calendar view
    of the timesheet review.

    Returns:
        List of exactly seven CalendarDay.
    """
    period = week_range(anchor, week_starts_on)
    return _build_days(
        period.start,
        period.end,
        _bucket_by_date(sessions),
        as_date(today),
        (period.start, period.end),
    )


def working_days_in_month(anchor_month: date | datetime) -> int:
    """
    Count Monday-Friday days in the month containing ``anchor_month``.

    No holiday calendar is applied.

    Example:
        >>> working_days_in_month(date(2024, 2, 1))
        21
    """
    first, last = month_bounds(anchor_month)
    return sum(
        1
        for offset in range((last - first).days + 1)
        if (first + timedelta(days=offset)).weekday() in Config.WORKING_WEEKDAYS
    )


def expected_month_minutes(
    anchor_month: date | datetime,
    expected_daily_minutes: int = Config.EXPECTED_DAILY_MINUTES,
) -> int:
    """Monthly target: working days times the expected daily minutes."""
    return working_days_in_month(anchor_month) * expected_daily_minutes

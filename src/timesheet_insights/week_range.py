"""
Week and month boundaries for timesheet navigation.

PURPOSE: Resolve the week/month a date belongs to and guard navigation.
AI CONTEXT: Pure date arithmetic - "now" is always passed in, never read.

WEEK-START CONVENTIONS:
- SUNDAY: Sunday-Saturday weeks (weekly timesheet review)
- MONDAY: Monday-Sunday weeks (monthly calendar grid)
Both are served by the same functions via the week_starts_on argument.

NAVIGATION RULES:
- The current week/month is always reachable
- Weeks/months after the current one are not (no future timesheets)

USAGE:
    period = week_range(date(2024, 1, 10))          # 2024-01-07 .. 2024-01-13
    can_advance_week(date(2024, 1, 3), date(2024, 1, 10))  # True
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta

from .models import WeekRange

SUNDAY = "sunday"
MONDAY = "monday"
WEEK_STARTS = (SUNDAY, MONDAY)


def as_date(value: date | datetime) -> date:
    """Truncate a datetime to its date; dates pass through unchanged."""
    if isinstance(value, datetime):
        return value.date()
    return value


def _days_since_week_start(day: date, week_starts_on: str) -> int:
    """
    Number of days between the week start and ``day``.

    Raises:
        ValueError: If week_starts_on is not "sunday" or "monday".
    """
    if week_starts_on == MONDAY:
        return day.weekday()
    if week_starts_on == SUNDAY:
        return (day.weekday() + 1) % 7
    raise ValueError(f"week_starts_on must be one of {WEEK_STARTS}, got {week_starts_on!r}")


def week_range(anchor: date | datetime, week_starts_on: str = SUNDAY) -> WeekRange:
    """
    Compute the inclusive boundary of the week containing ``anchor``.

    Business context: The weekly timesheet review queries sessions with
    date between start and end, and shows the range in the header.

    Args:
        anchor: Any day (or instant) in the week. Time is ignored.
        week_starts_on: "sunday" (default) or "monday".

    Returns:
        WeekRange whose start is the week-start day on/before anchor and
        whose end is start + 6 days.

    Raises:
        ValueError: If week_starts_on is not a supported convention.

    Example:
        >>> week_range(date(2024, 1, 10))
        WeekRange(start=datetime.date(2024, 1, 7), end=datetime.date(2024, 1, 13))
        >>> week_range(date(2024, 1, 10), MONDAY).start
        datetime.date(2024, 1, 8)
    """
    day = as_date(anchor)
    start = day - timedelta(days=_days_since_week_start(day, week_starts_on))
    return WeekRange(start=start, end=start + timedelta(days=6))


def shift_week(anchor: date | datetime, weeks: int) -> date:
    """Move an anchor date by whole weeks (negative goes back)."""
    return as_date(anchor) + timedelta(weeks=weeks)


def is_current_week(
    anchor: date | datetime,
    now: date | datetime,
    week_starts_on: str = SUNDAY,
) -> bool:
    """
    Check whether ``anchor`` falls in the same week as ``now``.

    Example:
        >>> is_current_week(date(2024, 1, 7), date(2024, 1, 13))
        True
    """
    return week_range(anchor, week_starts_on).start == week_range(now, week_starts_on).start


def can_advance_week(
    anchor: date | datetime,
    now: date | datetime,
    week_starts_on: str = SUNDAY,
) -> bool:
    """
    Check whether "next week" navigation is allowed from ``anchor``.

    Advancing is allowed while the week one step ahead starts on or before
    the start of the current week. From the current week itself the answer
    is therefore False, and from any earlier week it is True.

    Business context: Timesheets for future weeks cannot exist, so the
    "next" button is disabled once the reviewer reaches the current week.

    Args:
        anchor: Any day in the week currently displayed.
        now: Current instant, injected by the caller.
        week_starts_on: "sunday" (default) or "monday".

    Returns:
        True if the following week is not in the future.

    Example:
        >>> can_advance_week(date(2024, 1, 10), date(2024, 1, 10))
        False
        >>> can_advance_week(date(2024, 1, 3), date(2024, 1, 10))
        True
    """
    next_start = week_range(shift_week(anchor, 1), week_starts_on).start
    return next_start <= week_range(now, week_starts_on).start


# =============================================================================
# MONTH NAVIGATION
# =============================================================================


def month_bounds(anchor: date | datetime) -> tuple[date, date]:
    """
    First and last day of the month containing ``anchor``.

    Example:
        >>> month_bounds(date(2024, 2, 14))
        (datetime.date(2024, 2, 1), datetime.date(2024, 2, 29))
    """
    day = as_date(anchor)
    last_day = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last_day)


def shift_month(anchor: date | datetime, months: int) -> date:
    """
    Move an anchor date by whole months, clamping the day to the month length.

    Example:
        >>> shift_month(date(2024, 1, 31), 1)
        datetime.date(2024, 2, 29)
    """
    day = as_date(anchor)
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def is_current_month(anchor: date | datetime, now: date | datetime) -> bool:
    """Check whether ``anchor`` and ``now`` share year and month."""
    a, n = as_date(anchor), as_date(now)
    return (a.year, a.month) == (n.year, n.month)


def can_advance_month(anchor: date | datetime, now: date | datetime) -> bool:
    """
    Check whether "next month" navigation is allowed from ``anchor``.

    Same closed boundary as weeks: the current month is reachable, later
    months are not.

    Example:
        >>> can_advance_month(date(2024, 1, 15), date(2024, 2, 1))
        True
        >>> can_advance_month(date(2024, 2, 15), date(2024, 2, 1))
        False
    """
    next_month = shift_month(as_date(anchor).replace(day=1), 1)
    return next_month <= as_date(now).replace(day=1)

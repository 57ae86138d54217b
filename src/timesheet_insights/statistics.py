"""
Statistics engine for Timesheet Insights.

PURPOSE: Calculate session productivity metrics, summaries and leaderboards.
AI CONTEXT: Pure data processing - no visualization, no I/O, no clock reads.

METRIC CATEGORIES:
1. Session Metrics: Active time, productivity, target achievement, rating
2. Summary Metrics: Totals, aggregate productivity, status tallies
3. Team Metrics: Top performers ranked by aggregate productivity
4. Trend Metrics: Daily breakdown, week-over-week, monthly target

PRODUCTIVITY MODEL:
- Active minutes: total - idle (idle clamped to [0, total])
- Productivity: active / total * 100, from aggregate totals when summarizing
- Target achievement: total / expected daily minutes * 100
- Efficiency: active / expected daily minutes * 100

ROUNDING:
Percentages round half-up to integers (45.5 -> 46), matching how the
dashboards have always displayed them. Python's round() is banker's
rounding and is not used for these figures.

USAGE:
    aggregator = SessionAggregator()
    metrics = aggregator.compute_session_metrics(session)
    summary = aggregator.summarize(sessions)
    leaders = aggregator.rank_top_performers(sessions, users, limit=5)
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta

from .calendar_grid import expected_month_minutes, working_days_in_month
from .config import Config
from .models import (
    DailyStats,
    DerivedSessionMetrics,
    MonthlyStats,
    RankedUser,
    Session,
    SummaryStats,
    User,
    WeeklyComparison,
)
from .week_range import month_bounds, week_range


def round_half_up(value: float) -> int:
    """
    Round a non-negative ratio to the nearest integer, halves rounding up.

    Example:
        >>> round_half_up(88.5)
        89
        >>> round(88.5)
        88
    """
    return int(math.floor(value + 0.5))


def percentage(numerator: float, denominator: float) -> int:
    """Integer percentage of numerator over denominator, 0 for empty denominators."""
    if denominator <= 0:
        return 0
    return round_half_up(numerator / denominator * 100)


def percent_change(current: float, previous: float) -> float:
    """Percent change from previous to current, 0.0 when previous is 0."""
    if previous <= 0:
        return 0.0
    return round((current - previous) / previous * 100, 1)


def _clamped_minutes(session: Session) -> tuple[int, int]:
    """Return (total, idle) with both floored at 0 and idle capped at total."""
    total = max(session.total_minutes, 0)
    idle = min(max(session.idle_minutes, 0), total)
    return total, idle


class SessionAggregator:
    """
    Calculator for session productivity and timesheet statistics.

    DESIGN:
    - Stateless: Each method operates on provided data
    - Pure: No side effects, never mutates sessions, never reads the clock
    - Total: Every method returns a complete result for any input,
      including empty sequences and malformed minute counts

    PARAMETERS:
    - expected_daily_minutes: Workday length used as the target
      denominator (default Config.EXPECTED_DAILY_MINUTES = 480)
    """

    def __init__(self, expected_daily_minutes: int | None = None) -> None:
        """
        Initialize the aggregator with the expected workday length.

        Business context: Every user is measured against the same 8-hour
        day. The parameter exists so a deployment with a different standard
        day can change it in one place, not so individual users can differ.

        Args:
            expected_daily_minutes: Minutes in a standard workday. Values
                <= 0 or None fall back to Config.EXPECTED_DAILY_MINUTES.

        Example:
            >>> SessionAggregator().expected_daily_minutes
            480
            >>> SessionAggregator(expected_daily_minutes=450).expected_daily_minutes
            450
        """
        if expected_daily_minutes is None or expected_daily_minutes <= 0:
            expected_daily_minutes = Config.EXPECTED_DAILY_MINUTES
        self.expected_daily_minutes = expected_daily_minutes

    # =========================================================================
    # SESSION METRICS
    # =========================================================================

    def rate_performance(self, session_productivity: int, daily_target_achievement: int) -> str:
        """
        Map productivity and target achievement to a performance tier.

        Walks Config.RATING_RULES top to bottom; the first rule whose
        thresholds are met wins. The "BelowAverage" rule needs only one of
        its two thresholds. Nothing matching means "Poor".

        Args:
            session_productivity: Active share of the session, 0-100.
            daily_target_achievement: Session length against the workday, %.

        Returns:
            One of Config.PERFORMANCE_RATINGS.

        Example:
            >>> SessionAggregator().rate_performance(89, 94)
            'Good'
            >>> SessionAggregator().rate_performance(10, 55)
            'BelowAverage'
        """
        for rating, min_productivity, min_target, require_both in Config.RATING_RULES:
            productivity_ok = session_productivity >= min_productivity
            target_ok = daily_target_achievement >= min_target
            if require_both and productivity_ok and target_ok:
                return rating
            if not require_both and (productivity_ok or target_ok):
                return rating
        return Config.FALLBACK_RATING

    def compute_session_metrics(self, session: Session) -> DerivedSessionMetrics:
        """
        Derive productivity metrics and a performance rating for one session.

        Idle minutes above the session total are clamped to the total, so
        active minutes are never negative. A zero-length session yields
        zeros everywhere and a "Poor" rating.

        Business context: This is what a manager sees when opening a single
        session for review. Computing it in one place keeps the session
        modal, the weekly list and reports in agreement.

        Args:
            session: Session to evaluate.

        Returns:
            DerivedSessionMetrics with active_minutes, session_productivity,
            daily_target_achievement, efficiency_score, performance_rating,
            idle_percentage and screenshot coverage.

        Example:
            >>> s = Session(id='s1', user_id='u1', date=None,
            ...             total_minutes=450, idle_minutes=50)
            >>> m = SessionAggregator().compute_session_metrics(s)
            >>> (m.active_minutes, m.session_productivity, m.performance_rating)
            (400, 89, 'Good')
        """
        total, idle = _clamped_minutes(session)
        active = total - idle
        expected = self.expected_daily_minutes

        productivity = percentage(active, total)
        target_achievement = percentage(total, expected)
        screenshot_count = len(session.screenshots)
        screenshots_per_hour = (
            round_half_up(screenshot_count / max(total / 60, 1)) if total > 0 else 0
        )

        return DerivedSessionMetrics(
            total_minutes=total,
            idle_minutes=idle,
            active_minutes=active,
            session_productivity=productivity,
            daily_target_achievement=target_achievement,
            efficiency_score=percentage(active, expected),
            performance_rating=self.rate_performance(productivity, target_achievement),
            idle_percentage=percentage(idle, total),
            screenshot_count=screenshot_count,
            screenshots_per_hour=screenshots_per_hour,
            expected_daily_minutes=expected,
        )

    # =========================================================================
    # SUMMARY METRICS
    # =========================================================================

    def summarize(self, sessions: Iterable[Session]) -> SummaryStats:
        """
        Aggregate totals and status tallies over any collection of sessions.

        The productivity rate is computed from aggregate active and total
        minutes, not by averaging per-session rates, so short sessions do
        not skew it. Status counters use exact matches against the three
        known statuses; sessions with any other status still count toward
        totals but toward none of the counters.

        Business context: Powers the weekly review header (pending /
        approved / disapproved counts) and the analytics overview.

        Args:
            sessions: Sessions to aggregate. May be empty and may span
                several users and days.

        Returns:
            SummaryStats; all zeros for empty input.

        Example:
            >>> agg = SessionAggregator()
            >>> agg.summarize([]).total_sessions
            0
        """
        total_sessions = 0
        total_minutes = 0
        idle_minutes = 0
        status_counts = dict.fromkeys(Config.SESSION_STATUSES, 0)

        for session in sessions:
            total, idle = _clamped_minutes(session)
            total_sessions += 1
            total_minutes += total
            idle_minutes += idle
            if Config.is_known_status(session.status):
                status_counts[session.status] += 1

        active_minutes = total_minutes - idle_minutes
        return SummaryStats(
            total_sessions=total_sessions,
            total_minutes=total_minutes,
            idle_minutes=idle_minutes,
            active_minutes=active_minutes,
            productivity_rate=percentage(active_minutes, total_minutes),
            pending_count=status_counts[Config.STATUS_SUBMITTED],
            approved_count=status_counts[Config.STATUS_APPROVED],
            disapproved_count=status_counts[Config.STATUS_DISAPPROVED],
            average_session_minutes=(
                round(total_minutes / total_sessions, 2) if total_sessions else 0.0
            ),
        )

    def rank_top_performers(
        self,
        sessions: Iterable[Session],
        users: Iterable[User],
        limit: int = Config.TOP_PERFORMERS_LIMIT,
    ) -> list[RankedUser]:
        """
        Rank users by aggregate productivity over their sessions.

        Sessions are grouped by user_id and each group is summarized.
        Ordering: productivity rate descending, then total minutes
        descending, then user id ascending so ties are deterministic.
        Users without sessions are left out rather than ranked at 0%,
        and sessions belonging to ids missing from the directory are
        skipped because there is nobody to display.

        Args:
            sessions: Sessions in the analysis window.
            users: User directory to join display data from.
            limit: Maximum rows to return. <= 0 returns an empty list.

        Returns:
            List of RankedUser with 1-based rank, best first.

        Example:
            >>> leaders = SessionAggregator().rank_top_performers(sessions, users, 3)
            >>> [r.user.id for r in leaders]
            ['u2', 'u1', 'u3']
        """
        if limit <= 0:
            return []

        directory = {user.id: user for user in users}
        grouped: dict[str, list[Session]] = {}
        for session in sessions:
            if session.user_id in directory:
                grouped.setdefault(session.user_id, []).append(session)

        summaries = [
            (directory[user_id], self.summarize(user_sessions))
            for user_id, user_sessions in grouped.items()
        ]
        summaries.sort(
            key=lambda item: (-item[1].productivity_rate, -item[1].total_minutes, item[0].id)
        )

        return [
            RankedUser(rank=index, user=user, summary=summary)
            for index, (user, summary) in enumerate(summaries[:limit], start=1)
        ]

    # =========================================================================
    # TREND METRICS
    # =========================================================================

    def daily_breakdown(self, sessions: Iterable[Session]) -> list[DailyStats]:
        """
        Totals per calendar day, sorted by date.

        Sessions without a date are skipped since they cannot be placed on
        a timeline.

        Returns:
            One DailyStats per distinct session date.
        """
        by_day: dict[date, list[Session]] = {}
        for session in sessions:
            if session.date is not None:
                by_day.setdefault(session.date, []).append(session)

        result = []
        for day in sorted(by_day):
            summary = self.summarize(by_day[day])
            result.append(
                DailyStats(
                    date=day,
                    sessions=summary.total_sessions,
                    total_minutes=summary.total_minutes,
                    active_minutes=summary.active_minutes,
                    idle_minutes=summary.idle_minutes,
                    productivity_rate=summary.productivity_rate,
                )
            )
        return result

    def average_daily_minutes(self, sessions: Sequence[Session]) -> float:
        """Average tracked minutes per distinct working day, 0.0 when empty."""
        days = {s.date for s in sessions if s.date is not None}
        if not days:
            return 0.0
        total = sum(_clamped_minutes(s)[0] for s in sessions if s.date is not None)
        return round(total / len(days), 2)

    def weekly_comparison(
        self,
        sessions: Sequence[Session],
        now: date | datetime,
        week_starts_on: str = Config.DEFAULT_WEEK_START,
    ) -> WeeklyComparison:
        """
        Compare the week containing ``now`` with the week before it.

        Business context: Managers glance at this to see whether the team
        is trending up or down without picking dates.

        Args:
            sessions: Sessions covering at least the two weeks of interest.
            now: Current instant, injected by the caller.
            week_starts_on: "sunday" or "monday".

        Returns:
            WeeklyComparison with both summaries and the change figures.
        """
        current_range = week_range(now, week_starts_on)
        previous_range = week_range(current_range.start - timedelta(days=7), week_starts_on)

        current = self.summarize(
            s for s in sessions if s.date is not None and current_range.contains(s.date)
        )
        previous = self.summarize(
            s for s in sessions if s.date is not None and previous_range.contains(s.date)
        )

        productivity_change = (
            current.productivity_rate - previous.productivity_rate
            if previous.productivity_rate > 0
            else 0
        )

        return WeeklyComparison(
            current_range=current_range,
            previous_range=previous_range,
            current=current,
            previous=previous,
            total_minutes_change=percent_change(current.total_minutes, previous.total_minutes),
            productivity_change=productivity_change,
            sessions_change=percent_change(current.total_sessions, previous.total_sessions),
        )

    def monthly_stats(
        self, sessions: Sequence[Session], anchor_month: date | datetime
    ) -> MonthlyStats:
        """
        Month totals against the expected working-day target.

        Only sessions dated inside the anchor month are counted. The target
        is working_days_in_month * expected_daily_minutes.

        Args:
            sessions: Sessions for one user (or team) around the month.
            anchor_month: Any day in the month of interest.

        Returns:
            MonthlyStats for the month.

        Example:
            >>> SessionAggregator().monthly_stats([], date(2024, 2, 14)).expected_minutes
            10080
        """
        first, last = month_bounds(anchor_month)
        in_month = [s for s in sessions if s.date is not None and first <= s.date <= last]
        summary = self.summarize(in_month)
        expected = expected_month_minutes(first, self.expected_daily_minutes)

        return MonthlyStats(
            month_start=first,
            total_minutes=summary.total_minutes,
            total_sessions=summary.total_sessions,
            working_days=working_days_in_month(first),
            expected_minutes=expected,
            target_achievement=percentage(summary.total_minutes, expected),
            average_session_minutes=summary.average_session_minutes,
        )

    def generate_summary_report(
        self,
        user: User,
        sessions: Sequence[Session],
        now: date | datetime,
        week_starts_on: str = Config.DEFAULT_WEEK_START,
    ) -> str:
        """
        Render a plain-text weekly timesheet report for one user.

        Lists the week's sessions with their metrics followed by the week
        summary. Used by the CLI ``report`` command.

        Args:
            user: Whose timesheet this is.
            sessions: That user's sessions for the week being reported.
            now: Any day inside the reported week.
            week_starts_on: "sunday" or "monday".

        Returns:
            Multi-line report string.
        """
        period = week_range(now, week_starts_on)
        in_week = sorted(
            (s for s in sessions if s.date is not None and period.contains(s.date)),
            key=lambda s: (s.date, s.id),
        )
        summary = self.summarize(in_week)

        lines = [
            "=" * 50,
            "WEEKLY TIMESHEET REPORT",
            "=" * 50,
            f"User: {user.display_name} ({user.id})",
            f"Week: {period.start.isoformat()} - {period.end.isoformat()}",
            "",
            "SESSIONS",
        ]
        if not in_week:
            lines.append("  (no sessions)")
        for session in in_week:
            metrics = self.compute_session_metrics(session)
            lines.append(
                f"  {session.date_key}  {format_minutes(metrics.total_minutes):>8}  "
                f"active {metrics.session_productivity:>3}%  "
                f"{metrics.performance_rating:<12} {session.status}"
            )

        lines.extend(
            [
                "",
                "SUMMARY",
                f"  Total time: {format_minutes(summary.total_minutes)}",
                f"  Active time: {format_minutes(summary.active_minutes)}",
                f"  Idle time: {format_minutes(summary.idle_minutes)}",
                f"  Productivity: {summary.productivity_rate}%",
                f"  Pending: {summary.pending_count}  Approved: {summary.approved_count}"
                f"  Disapproved: {summary.disapproved_count}",
                "=" * 50,
            ]
        )
        return "\n".join(lines)


def format_minutes(minutes: int) -> str:
    """
    Format minutes as "Xh Ym", dropping a zero component.

    Example:
        >>> format_minutes(0)
        '0h 0m'
        >>> format_minutes(45)
        '45m'
        >>> format_minutes(120)
        '2h'
        >>> format_minutes(135)
        '2h 15m'
    """
    if minutes <= 0:
        return "0h 0m"
    hours, mins = divmod(int(minutes), 60)
    if hours == 0:
        return f"{mins}m"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"

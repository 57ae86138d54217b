"""
Presenters for Timesheet Insights dashboards.

PURPOSE: Testable business logic layer between data and UI.
AI CONTEXT: Data transformation only - the presenter loads from storage,
the core computes, the view model is returned. No rendering here except charts.

DESIGN PRINCIPLES:
1. Presenters receive data, return view models (dataclasses with to_dict())
2. No dependencies on a specific UI framework
3. "now" is passed in by the caller; presenters never read the clock
4. Each presenter method backs one dashboard view

USAGE:
    presenter = DashboardPresenter(storage, aggregator)
    review = presenter.get_week_review("u1", anchor=date(2024, 1, 10), now=now)
    payload = review.to_dict()   # JSON-ready for the API
"""

from __future__ import annotations

import io
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from .access import role_counts, visible_users
from .calendar_grid import build_month_grid, build_week_grid
from .config import Config
from .models import (
    CalendarDay,
    DailyStats,
    DerivedSessionMetrics,
    MonthlyStats,
    RankedUser,
    Session,
    SummaryStats,
    User,
    WeeklyComparison,
    WeekRange,
)
from .statistics import format_minutes
from .week_range import (
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

if TYPE_CHECKING:
    from .statistics import SessionAggregator
    from .storage import StorageManager

__all__ = [
    "SessionViewModel",
    "WeekReviewViewModel",
    "MonthlyTimesheetViewModel",
    "AnalyticsViewModel",
    "DashboardPresenter",
    "ChartPresenter",
]

# Chart color palette for consistent styling
CHART_COLORS: dict[str, str] = {
    "active": "#22c55e",
    "idle": "#f97316",
    "productivity": "#3b82f6",
}

RATING_CLASSES: dict[str, str] = {
    "Excellent": "rating-excellent",
    "Good": "rating-good",
    "Average": "rating-average",
    "BelowAverage": "rating-below-average",
    "Poor": "rating-poor",
}

RATING_LABELS: dict[str, str] = {"BelowAverage": "Below Average"}


@dataclass
class SessionViewModel:
    """View model for one session row, and for the session detail modal."""

    session: Session
    metrics: DerivedSessionMetrics

    @property
    def duration_display(self) -> str:
        """
        Format total session time as "Xh Ym".

        Business context: Managers compare sessions against the 8-hour day
        at a glance, so hours come first.

        Example:
            >>> vm.duration_display
            '7h 30m'
        """
        return format_minutes(self.metrics.total_minutes)

    @property
    def active_display(self) -> str:
        return format_minutes(self.metrics.active_minutes)

    @property
    def rating_label(self) -> str:
        """Human-readable rating ("BelowAverage" reads as "Below Average")."""
        rating = self.metrics.performance_rating
        return RATING_LABELS.get(rating, rating)

    @property
    def rating_class(self) -> str:
        return RATING_CLASSES.get(self.metrics.performance_rating, "rating-unknown")

    @property
    def status_class(self) -> str:
        """
        Get CSS class name for the approval status badge.

        Unknown statuses get a neutral style rather than being guessed at.

        Example:
            >>> vm.status_class
            'status-approved'
        """
        return {
            Config.STATUS_SUBMITTED: "status-submitted",
            Config.STATUS_APPROVED: "status-approved",
            Config.STATUS_DISAPPROVED: "status-disapproved",
        }.get(self.session.status, "status-unknown")

    def to_dict(self, include_screenshots: bool = False) -> dict[str, Any]:
        """
        Serialize for the JSON API.

        Args:
            include_screenshots: Add the screenshot list (detail view only;
                images are large, so lists omit them).

        Returns:
            Dict of session fields, metrics and display strings.
        """
        data: dict[str, Any] = {
            "id": self.session.id,
            "user_id": self.session.user_id,
            "user_name": self.session.user_name,
            "date": self.session.date_key,
            "clock_in": self.session.clock_in.isoformat() if self.session.clock_in else None,
            "clock_out": self.session.clock_out.isoformat() if self.session.clock_out else None,
            "status": self.session.status,
            "status_class": self.status_class,
            "is_open": self.session.is_open,
            "manager_comment": self.session.manager_comment,
            "employee_comment": self.session.employee_comment,
            "metrics": self.metrics.to_dict(),
            "duration_display": self.duration_display,
            "active_display": self.active_display,
            "rating_label": self.rating_label,
            "rating_class": self.rating_class,
        }
        if include_screenshots:
            data["screenshots"] = [s.to_dict() for s in self.session.screenshots]
        return data


@dataclass
class WeekReviewViewModel:
    """Weekly timesheet review for one user."""

    user: User
    week: WeekRange
    days: list[CalendarDay] = field(default_factory=list)
    sessions: list[SessionViewModel] = field(default_factory=list)
    summary: SummaryStats = field(default_factory=SummaryStats)
    is_current_week: bool = False
    can_go_next: bool = False
    previous_week: date | None = None
    next_week: date | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "user": self.user.to_dict(),
            "week": self.week.to_dict(),
            "days": [d.to_dict() for d in self.days],
            "sessions": [s.to_dict() for s in self.sessions],
            "summary": self.summary.to_dict(),
            "is_current_week": self.is_current_week,
            "can_go_next": self.can_go_next,
            "previous_week": self.previous_week.isoformat() if self.previous_week else None,
            "next_week": self.next_week.isoformat() if self.next_week else None,
        }


@dataclass
class MonthlyTimesheetViewModel:
    """Monthly calendar grid and target progress for one user."""

    user: User
    stats: MonthlyStats
    days: list[CalendarDay] = field(default_factory=list)
    is_current_month: bool = False
    can_go_next: bool = False
    previous_month: date | None = None
    next_month: date | None = None

    @property
    def hours_display(self) -> str:
        """Tracked against expected time, e.g. "152h 30m / 168h"."""
        return (
            f"{format_minutes(self.stats.total_minutes)} / "
            f"{format_minutes(self.stats.expected_minutes)}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "user": self.user.to_dict(),
            "stats": self.stats.to_dict(),
            "days": [d.to_dict() for d in self.days],
            "is_current_month": self.is_current_month,
            "can_go_next": self.can_go_next,
            "hours_display": self.hours_display,
            "previous_month": self.previous_month.isoformat() if self.previous_month else None,
            "next_month": self.next_month.isoformat() if self.next_month else None,
        }


@dataclass
class AnalyticsViewModel:
    """Team analytics over a date range."""

    start: date
    end: date
    summary: SummaryStats
    daily: list[DailyStats] = field(default_factory=list)
    top_performers: list[RankedUser] = field(default_factory=list)
    weekly: WeeklyComparison | None = None
    average_daily_minutes: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "summary": self.summary.to_dict(),
            "daily": [d.to_dict() for d in self.daily],
            "top_performers": [r.to_dict() for r in self.top_performers],
            "weekly": self.weekly.to_dict() if self.weekly else None,
            "average_daily_minutes": self.average_daily_minutes,
        }


@dataclass
class UserDirectoryViewModel:
    """Admin user-management overview: head counts and the directory."""

    users: list[User] = field(default_factory=list)
    counts: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "counts": dict(self.counts),
            "users": [u.to_dict() for u in self.users],
        }


def _in_range(sessions: Iterable[Session], start: date, end: date) -> list[Session]:
    return [s for s in sessions if s.date is not None and start <= s.date <= end]


class DashboardPresenter:
    """
    Presenter for the timesheet dashboard views.

    Transforms storage data into view models ready for rendering.
    All methods are read-only; reviews go through StorageManager directly.
    """

    def __init__(
        self,
        storage: StorageManager,
        aggregator: SessionAggregator,
    ) -> None:
        """
        Initialize dashboard presenter with data dependencies.

        Business context: Dependency injection lets tests drive the
        presenter with a MockFileSystem-backed store.

        Args:
            storage: StorageManager for loading sessions and users.
            aggregator: SessionAggregator for all metric calculations.

        Example:
            >>> presenter = DashboardPresenter(StorageManager(), SessionAggregator())
        """
        self.storage = storage
        self.aggregator = aggregator

    def _require_user(self, user_id: str) -> User:
        user = self.storage.get_user(user_id)
        if user is None:
            raise KeyError(user_id)
        return user

    def _session_view(self, session: Session) -> SessionViewModel:
        return SessionViewModel(
            session=session,
            metrics=self.aggregator.compute_session_metrics(session),
        )

    def get_visible_users(self, viewer_id: str) -> list[User]:
        """
        Users the given viewer may review.

        Raises:
            KeyError: If viewer_id is not in the directory.
        """
        viewer = self._require_user(viewer_id)
        return visible_users(viewer, self.storage.load_users())

    def get_user_directory(self) -> UserDirectoryViewModel:
        """
        Whole directory with active, revoked and per-role head counts.

        Business context: Admins see at a glance how many people can still
        clock in and how the team splits across roles before editing anyone.
        Revoked users stay listed so their access can be restored.
        """
        users = sorted(self.storage.load_users(), key=lambda u: (u.display_name.lower(), u.id))
        return UserDirectoryViewModel(users=users, counts=role_counts(users))

    def get_week_review(
        self,
        user_id: str,
        anchor: date | datetime,
        now: date | datetime,
        week_starts_on: str = Config.DEFAULT_WEEK_START,
    ) -> WeekReviewViewModel:
        """
        Build the weekly timesheet review for one user.

        Resolves the week containing ``anchor``, filters the user's sessions
        into it, and attaches per-session metrics, the week summary and the
        navigation state.

        Business context: This is the manager's main screen. The header
        shows pending/approved/disapproved counts; the next-week button is
        disabled once the current week is reached.

        Args:
            user_id: Whose timesheet to show.
            anchor: Any day in the week to show.
            now: Current instant (injected).
            week_starts_on: "sunday" (default) or "monday".

        Returns:
            WeekReviewViewModel. Sessions are ordered by date then clock-in.

        Raises:
            KeyError: If user_id is not in the directory.
            ValueError: If week_starts_on is invalid.

        Example:
            >>> review = presenter.get_week_review("u1", date(2024, 1, 10), now)
            >>> review.week.start
            datetime.date(2024, 1, 7)
        """
        user = self._require_user(user_id)
        period = week_range(anchor, week_starts_on)
        in_week = _in_range(self.storage.get_user_sessions(user_id), period.start, period.end)
        in_week.sort(key=lambda s: (s.date, s.clock_in.isoformat() if s.clock_in else "", s.id))

        can_go_next = can_advance_week(anchor, now, week_starts_on)
        return WeekReviewViewModel(
            user=user,
            week=period,
            days=build_week_grid(anchor, in_week, week_starts_on, as_date(now)),
            sessions=[self._session_view(s) for s in in_week],
            summary=self.aggregator.summarize(in_week),
            is_current_week=is_current_week(anchor, now, week_starts_on),
            can_go_next=can_go_next,
            previous_week=shift_week(period.start, -1),
            next_week=shift_week(period.start, 1) if can_go_next else None,
        )

    def get_monthly_timesheet(
        self,
        user_id: str,
        anchor_month: date | datetime,
        now: date | datetime,
        week_starts_on: str = Config.MONTH_GRID_WEEK_START,
    ) -> MonthlyTimesheetViewModel:
        """
        Build the monthly calendar and target progress for one user.

        Raises:
            KeyError: If user_id is not in the directory.
            ValueError: If week_starts_on is invalid.
        """
        user = self._require_user(user_id)
        sessions = self.storage.get_user_sessions(user_id)
        first = month_bounds(anchor_month)[0]
        can_go_next = can_advance_month(anchor_month, now)
        return MonthlyTimesheetViewModel(
            user=user,
            stats=self.aggregator.monthly_stats(sessions, anchor_month),
            days=build_month_grid(anchor_month, sessions, week_starts_on, as_date(now)),
            is_current_month=is_current_month(anchor_month, now),
            can_go_next=can_go_next,
            previous_month=shift_month(first, -1),
            next_month=shift_month(first, 1) if can_go_next else None,
        )

    def get_analytics(
        self,
        user_ids: Iterable[str] | None,
        start: date | None,
        end: date | None,
        now: date | datetime,
    ) -> AnalyticsViewModel:
        """
        Build the team analytics report.

        Business context: Managers pick a date range (default: the current
        month) and optionally a subset of their team. The week-over-week
        block always compares the week containing ``now`` with the week
        before it, regardless of the selected range.

        Args:
            user_ids: Users to include. None means every user.
            start: First day of the range. None means start of now's month.
            end: Last day of the range. None means ``now``.
            now: Current instant (injected).

        Returns:
            AnalyticsViewModel with overall summary, daily breakdown,
            top performers and weekly comparison.

        Raises:
            ValueError: If start is after end.
        """
        today = as_date(now)
        start = start or month_bounds(today)[0]
        end = end or today
        if start > end:
            raise ValueError(f"start {start.isoformat()} is after end {end.isoformat()}")

        sessions = self.storage.load_sessions()
        if user_ids is not None:
            selected = set(user_ids)
            sessions = [s for s in sessions if s.user_id in selected]
        in_range = _in_range(sessions, start, end)

        return AnalyticsViewModel(
            start=start,
            end=end,
            summary=self.aggregator.summarize(in_range),
            daily=self.aggregator.daily_breakdown(in_range),
            top_performers=self.aggregator.rank_top_performers(
                in_range, self.storage.load_users()
            ),
            weekly=self.aggregator.weekly_comparison(sessions, now),
            average_daily_minutes=self.aggregator.average_daily_minutes(in_range),
        )

    def get_session_detail(self, session_id: str) -> SessionViewModel:
        """
        Session with its derived metrics for the detail modal.

        Raises:
            KeyError: If no session has this id.
        """
        session = self.storage.get_session(session_id)
        if session is None:
            raise KeyError(session_id)
        return self._session_view(session)


class ChartPresenter:
    """
    Presenter for generating chart images.

    Uses matplotlib for server-side chart rendering.
    Returns PNG images as bytes.
    """

    def __init__(
        self,
        storage: StorageManager,
        aggregator: SessionAggregator,
    ) -> None:
        """
        Initialize chart presenter with data dependencies.

        matplotlib is imported lazily inside the render methods so the rest
        of the dashboard works without it.

        Args:
            storage: StorageManager for loading sessions.
            aggregator: SessionAggregator for the daily breakdown.
        """
        self.storage = storage
        self.aggregator = aggregator

    def render_daily_productivity_chart(
        self,
        user_ids: Iterable[str] | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> bytes:
        """
        Render active vs idle hours per day as a stacked bar chart PNG.

        Bars stack active (green) and idle (orange) hours; the title carries
        the aggregate productivity of the range.

        Business context: The analytics page shows this under the summary
        so dips in productivity are visible day by day.

        Args:
            user_ids: Users to include. None means every user.
            start: First day to include. None means no lower bound.
            end: Last day to include. None means no upper bound.

        Returns:
            PNG image as bytes. Shows placeholder text if no sessions match.

        Raises:
            ImportError: If matplotlib is not installed. Caller should
                catch this and provide fallback (e.g., placeholder SVG).

        Example:
            >>> try:
            ...     png = presenter.render_daily_productivity_chart(["u1"])
            ... except ImportError:
            ...     png = None
        """
        import matplotlib

        matplotlib.use("Agg")  # Non-interactive backend
        import matplotlib.pyplot as plt

        sessions = self.storage.load_sessions()
        if user_ids is not None:
            selected = set(user_ids)
            sessions = [s for s in sessions if s.user_id in selected]
        sessions = [
            s
            for s in sessions
            if s.date is not None
            and (start is None or s.date >= start)
            and (end is None or s.date <= end)
        ]
        daily = self.aggregator.daily_breakdown(sessions)

        fig, ax = plt.subplots(figsize=(8, 3))
        if not daily:
            ax.text(0.5, 0.5, "No sessions in range", ha="center", va="center", fontsize=14)
            ax.set_xlim(0, 1)
            ax.set_ylim(0, 1)
            ax.axis("off")
        else:
            positions = range(len(daily))
            active = [d.active_minutes / 60 for d in daily]
            idle = [d.idle_minutes / 60 for d in daily]

            ax.bar(positions, active, color=CHART_COLORS["active"], label="Active")
            ax.bar(positions, idle, bottom=active, color=CHART_COLORS["idle"], label="Idle")
            ax.axhline(
                self.aggregator.expected_daily_minutes / 60,
                color=CHART_COLORS["productivity"],
                linestyle="--",
                linewidth=1,
                label="Target",
            )
            ax.set_xticks(list(positions))
            ax.set_xticklabels([d.date.strftime("%m/%d") for d in daily], rotation=45, ha="right")
            ax.set_ylabel("Hours")
            summary = self.aggregator.summarize(sessions)
            ax.set_title(f"Daily Activity (Productivity: {summary.productivity_rate}%)")
            ax.legend(loc="upper right", fontsize=8)
            ax.spines["top"].set_visible(False)
            ax.spines["right"].set_visible(False)

        buf = io.BytesIO()
        plt.tight_layout()
        plt.savefig(buf, format="png", dpi=100, bbox_inches="tight")
        plt.close(fig)
        buf.seek(0)
        return buf.read()

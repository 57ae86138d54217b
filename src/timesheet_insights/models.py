"""
Data models for Timesheet Insights.

PURPOSE: Type-safe dataclasses representing input records and derived view data.
AI CONTEXT: These models define the data schema flowing into and out of the core.

MODEL HIERARCHY:
Input records (fetched from the document store, read-only here):
- Session: One clock-in/clock-out work period for one user on one day
- Screenshot: Capture record attached to a Session
- User: Directory entry (display name, role, manager)

Derived records (computed per render, never stored):
- DerivedSessionMetrics: Productivity figures and rating for one Session
- SummaryStats: Totals and status tallies over many Sessions
- RankedUser: Leaderboard row
- DailyStats, WeeklyComparison, MonthlyStats: Analytics aggregates
- WeekRange, CalendarDay: Calendar navigation and grid cells

SERIALIZATION:
Input records have from_dict() accepting the document-store shape (camelCase)
as well as snake_case keys, and to_dict() producing the document-store shape.
Derived records have to_dict() producing JSON-ready snake_case dicts.
Dates serialize as YYYY-MM-DD, timestamps as ISO 8601.

NORMALIZATION:
from_dict() never rejects a document for bad numbers: missing, non-numeric
or negative minute counts become 0. Unparseable timestamps become None.

USAGE:
    session = Session.from_dict(doc)
    user = User.from_dict(user_doc)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from .config import Config


def _coerce_minutes(value: Any) -> int:
    """
    Normalize a minute count from an untrusted document.

    Business context: Tracking clients occasionally write null, strings or
    negative values. A half-rendered dashboard is worse than a zero, so bad
    values collapse to 0 instead of raising.

    Args:
        value: Raw value from the document (int, float, str, None, ...).

    Returns:
        Non-negative integer minutes. Floats are truncated.

    Example:
        >>> _coerce_minutes("45")
        45
        >>> _coerce_minutes(-3)
        0
        >>> _coerce_minutes(None)
        0
    """
    if isinstance(value, bool):
        return 0
    try:
        minutes = int(float(value))
    except (TypeError, ValueError):
        return 0
    return max(minutes, 0)


def parse_date(value: Any) -> date | None:
    """
    Convert a date-only value to a date.

    Accepts date objects, datetimes (time dropped) and strings whose first
    ten characters are YYYY-MM-DD.

    Args:
        value: Raw value from a document or query string.

    Returns:
        date instance, or None when the value cannot be parsed.

    Example:
        >>> parse_date("2024-01-10")
        datetime.date(2024, 1, 10)
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def _parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO 8601 timestamp, accepting a trailing 'Z'."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _first_present(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the value of the first key present and not None."""
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return default


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


# =============================================================================
# INPUT RECORDS
# =============================================================================


@dataclass(frozen=True)
class Screenshot:
    """Periodic screen capture taken during a session."""

    id: str
    timestamp: datetime | None
    image: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Screenshot:
        return cls(
            id=str(data.get("id", "")),
            timestamp=_parse_timestamp(data.get("timestamp")),
            image=str(data.get("image", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "timestamp": _iso(self.timestamp), "image": self.image}


@dataclass(frozen=True)
class Session:
    """
    One clock-in to clock-out work period for one user on one calendar day.

    LIFECYCLE:
    1. Created by the tracking client when a work period closes
    2. Read by this package (never mutated by the core)
    3. Reviewed by a manager: status becomes approved or disapproved

    STATUS VALUES:
    - "submitted": Awaiting manager review
    - "approved": Accepted by manager
    - "disapproved": Rejected by manager with a comment
    Any other string is kept verbatim and excluded from status tallies.

    INVARIANTS (after from_dict):
    - total_minutes >= 0 and idle_minutes >= 0
    - idle_minutes may still exceed total_minutes; consumers clamp
    """

    id: str
    user_id: str
    date: date | None
    total_minutes: int = 0
    idle_minutes: int = 0
    clock_in: datetime | None = None
    clock_out: datetime | None = None
    screenshots: tuple[Screenshot, ...] = ()
    status: str = "submitted"
    manager_comment: str | None = None
    employee_comment: str | None = None
    user_name: str = ""
    manager_id: str | None = None

    @property
    def is_open(self) -> bool:
        """True while the session has no clock-out timestamp."""
        return self.clock_out is None

    @property
    def date_key(self) -> str:
        """Date-only grouping key (YYYY-MM-DD), empty when date is unknown."""
        return self.date.isoformat() if self.date is not None else ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Session:
        """
        Build a Session from a document-store record.

        Accepts the camelCase document shape written by the tracking client
        (userId, totalMinutes, idleMinutes, clockIn, clockOut,
        lessHoursComment, managerComment) as well as snake_case keys. The
        status falls back to approvalStatus and then "submitted", matching
        what the fetch layer assumes for documents without one.

        Business context: Upstream data quality cannot be guaranteed.
        Normalizing here keeps every downstream calculation total.

        Args:
            data: Raw session document. Must contain 'id'.

        Returns:
            Frozen Session instance with normalized numeric fields.

        Raises:
            KeyError: If required field 'id' is missing.

        Example:
            >>> s = Session.from_dict({'id': 's1', 'userId': 'u1',
            ...     'date': '2024-01-10', 'totalMinutes': 450, 'idleMinutes': 50})
            >>> s.total_minutes, s.idle_minutes
            (450, 50)
        """
        screenshots = _first_present(data, "screenshots", default=[]) or []
        return cls(
            id=str(data["id"]),
            user_id=str(_first_present(data, "userId", "user_id", default="")),
            date=parse_date(data.get("date")),
            total_minutes=_coerce_minutes(_first_present(data, "totalMinutes", "total_minutes")),
            idle_minutes=_coerce_minutes(_first_present(data, "idleMinutes", "idle_minutes")),
            clock_in=_parse_timestamp(_first_present(data, "clockIn", "clock_in")),
            clock_out=_parse_timestamp(_first_present(data, "clockOut", "clock_out")),
            screenshots=tuple(
                Screenshot.from_dict(item) for item in screenshots if isinstance(item, dict)
            ),
            status=str(
                _first_present(data, "status", "approvalStatus", default=Config.STATUS_SUBMITTED)
            ),
            manager_comment=_first_present(data, "managerComment", "manager_comment"),
            employee_comment=_first_present(
                data, "lessHoursComment", "employeeComment", "employee_comment"
            ),
            user_name=str(_first_present(data, "userName", "user_name", default="")),
            manager_id=_first_present(data, "managerId", "manager_id"),
        )

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize to the document-store shape.

        Returns:
            Dict with camelCase keys, date as YYYY-MM-DD and timestamps
            as ISO 8601 strings, suitable for json.dumps().
        """
        return {
            "id": self.id,
            "userId": self.user_id,
            "userName": self.user_name,
            "date": self.date_key,
            "clockIn": _iso(self.clock_in),
            "clockOut": _iso(self.clock_out),
            "totalMinutes": self.total_minutes,
            "idleMinutes": self.idle_minutes,
            "screenshots": [s.to_dict() for s in self.screenshots],
            "status": self.status,
            "managerComment": self.manager_comment,
            "lessHoursComment": self.employee_comment,
            "managerId": self.manager_id,
        }


@dataclass(frozen=True)
class User:
    """
    Directory entry for a person on the platform.

    ROLES:
    - "admin": Sees and manages everyone
    - "manager": Reviews timesheets of users assigned to them
    - "employee": Tracked user, no dashboard access
    """

    id: str
    display_name: str
    role: str = "employee"
    manager_id: str | None = None
    email: str = ""
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> User:
        """
        Build a User from a directory document.

        Display name falls back from fullName to displayName to email, so a
        leaderboard row always has something to show. A missing isActive
        flag means active (only an explicit false revokes access).

        Raises:
            KeyError: If required field 'id' is missing.
        """
        email = str(data.get("email", "") or "")
        return cls(
            id=str(data["id"]),
            display_name=str(
                _first_present(data, "fullName", "displayName", "display_name", default=email)
            ),
            role=str(data.get("role") or Config.ROLE_EMPLOYEE),
            manager_id=_first_present(data, "managerId", "manager_id"),
            email=email,
            is_active=_first_present(data, "isActive", "is_active", default=True) is not False,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "fullName": self.display_name,
            "role": self.role,
            "managerId": self.manager_id,
            "email": self.email,
            "isActive": self.is_active,
        }


# =============================================================================
# DERIVED RECORDS
# =============================================================================


@dataclass(frozen=True)
class DerivedSessionMetrics:
    """Productivity figures and performance tier for a single session."""

    total_minutes: int
    idle_minutes: int
    active_minutes: int
    session_productivity: int
    daily_target_achievement: int
    efficiency_score: int
    performance_rating: str
    idle_percentage: int
    screenshot_count: int
    screenshots_per_hour: int
    expected_daily_minutes: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_minutes": self.total_minutes,
            "idle_minutes": self.idle_minutes,
            "active_minutes": self.active_minutes,
            "session_productivity": self.session_productivity,
            "daily_target_achievement": self.daily_target_achievement,
            "efficiency_score": self.efficiency_score,
            "performance_rating": self.performance_rating,
            "idle_percentage": self.idle_percentage,
            "screenshot_count": self.screenshot_count,
            "screenshots_per_hour": self.screenshots_per_hour,
            "expected_daily_minutes": self.expected_daily_minutes,
        }


@dataclass(frozen=True)
class SummaryStats:
    """
    Aggregate statistics over a collection of sessions.

    productivity_rate is computed from aggregate totals, not averaged over
    per-session rates. Status counters only count exact known statuses.
    """

    total_sessions: int = 0
    total_minutes: int = 0
    idle_minutes: int = 0
    active_minutes: int = 0
    productivity_rate: int = 0
    pending_count: int = 0
    approved_count: int = 0
    disapproved_count: int = 0
    average_session_minutes: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_sessions": self.total_sessions,
            "total_minutes": self.total_minutes,
            "idle_minutes": self.idle_minutes,
            "active_minutes": self.active_minutes,
            "productivity_rate": self.productivity_rate,
            "pending_count": self.pending_count,
            "approved_count": self.approved_count,
            "disapproved_count": self.disapproved_count,
            "average_session_minutes": self.average_session_minutes,
        }


@dataclass(frozen=True)
class RankedUser:
    """Leaderboard row: one user with their aggregate productivity."""

    rank: int
    user: User
    summary: SummaryStats

    @property
    def productivity_rate(self) -> int:
        return self.summary.productivity_rate

    @property
    def total_hours(self) -> float:
        return self.summary.total_minutes / 60

    def to_dict(self) -> dict[str, Any]:
        return {
            "rank": self.rank,
            "user_id": self.user.id,
            "display_name": self.user.display_name,
            "role": self.user.role,
            "productivity_rate": self.productivity_rate,
            "total_minutes": self.summary.total_minutes,
            "total_hours": round(self.total_hours, 2),
            "sessions": self.summary.total_sessions,
        }


@dataclass(frozen=True)
class DailyStats:
    """Per-day totals for the analytics trend."""

    date: date
    sessions: int
    total_minutes: int
    active_minutes: int
    idle_minutes: int
    productivity_rate: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "sessions": self.sessions,
            "total_minutes": self.total_minutes,
            "active_minutes": self.active_minutes,
            "idle_minutes": self.idle_minutes,
            "productivity_rate": self.productivity_rate,
        }


@dataclass(frozen=True)
class WeekRange:
    """Inclusive date boundary of one week."""

    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass(frozen=True)
class WeeklyComparison:
    """
    Current week against the previous week.

    CHANGE FIELDS:
    - total_minutes_change: percent change, 0 when previous week is empty
    - productivity_change: percentage-point delta, 0 when previous rate is 0
    - sessions_change: percent change, 0 when previous week had no sessions
    """

    current_range: WeekRange
    previous_range: WeekRange
    current: SummaryStats
    previous: SummaryStats
    total_minutes_change: float
    productivity_change: int
    sessions_change: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_range": self.current_range.to_dict(),
            "previous_range": self.previous_range.to_dict(),
            "current": self.current.to_dict(),
            "previous": self.previous.to_dict(),
            "change": {
                "total_minutes": self.total_minutes_change,
                "productivity_rate": self.productivity_change,
                "sessions": self.sessions_change,
            },
        }


@dataclass(frozen=True)
class MonthlyStats:
    """Month totals against the expected working-day target."""

    month_start: date
    total_minutes: int
    total_sessions: int
    working_days: int
    expected_minutes: int
    target_achievement: int
    average_session_minutes: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": self.month_start.strftime("%Y-%m"),
            "total_minutes": self.total_minutes,
            "total_sessions": self.total_sessions,
            "working_days": self.working_days,
            "expected_minutes": self.expected_minutes,
            "target_achievement": self.target_achievement,
            "average_session_minutes": self.average_session_minutes,
        }


@dataclass(frozen=True)
class CalendarDay:
    """One cell of a calendar grid with the sessions that fall on it."""

    date: date
    is_current_period: bool
    is_today: bool
    sessions: tuple[Session, ...] = field(default_factory=tuple)
    total_minutes: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "is_current_period": self.is_current_period,
            "is_today": self.is_today,
            "session_ids": [s.id for s in self.sessions],
            "total_minutes": self.total_minutes,
        }

"""
FastAPI routes for the Timesheet Insights dashboard.

PURPOSE: Thin route handlers that delegate to presenters.
AI CONTEXT: Routes should be simple - business logic in presenters.

ROUTE STRUCTURE:
- / : Analytics overview page (full HTML)
- /charts/* : PNG chart images
- /api/* : JSON endpoints for the review UI and integrations

ERROR MAPPING:
- KeyError (unknown user or session) -> 404
- ValueError (bad week start, bad range, bad review or user edit) -> 400
- Reviewer outside the owner's team, or a non-admin editing users -> 403

CLOCK:
Handlers receive "now" through the get_now dependency, the only place
the web layer reads the clock. Tests override it with a fixed instant.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from html import escape
from typing import TYPE_CHECKING, Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import HTMLResponse, Response
from pydantic import BaseModel, Field

from ..access import can_review
from ..config import Config
from ..presenters import ChartPresenter, DashboardPresenter
from ..statistics import SessionAggregator, format_minutes
from ..storage import StorageManager

if TYPE_CHECKING:
    from ..presenters import AnalyticsViewModel

__all__ = [
    "router",
    "get_storage",
    "get_aggregator",
    "get_dashboard_presenter",
    "get_chart_presenter",
    "get_now",
]

logger = logging.getLogger(__name__)

router = APIRouter()

# =============================================================================
# CSS Styles
# =============================================================================

_DASHBOARD_CSS = """
:root {
    --bg: #0f172a;
    --surface: #1e293b;
    --border: #334155;
    --text: #f1f5f9;
    --text-muted: #94a3b8;
    --primary: #3b82f6;
    --success: #22c55e;
    --warning: #f59e0b;
    --danger: #ef4444;
}
* { box-sizing: border-box; margin: 0; padding: 0; }
body {
    font-family: system-ui, -apple-system, sans-serif;
    background: var(--bg);
    color: var(--text);
    line-height: 1.6;
    padding: 1rem;
}
.container { max-width: 1400px; margin: 0 auto; }
header {
    display: flex;
    justify-content: space-between;
    align-items: center;
    margin-bottom: 1.5rem;
    padding-bottom: 1rem;
    border-bottom: 1px solid var(--border);
}
h1 { font-size: 1.5rem; font-weight: 600; }
.range { color: var(--text-muted); font-size: 0.875rem; }
.grid {
    display: grid;
    grid-template-columns: repeat(auto-fit, minmax(220px, 1fr));
    gap: 1rem;
    margin-bottom: 1.5rem;
}
.panel {
    background: var(--surface);
    border: 1px solid var(--border);
    border-radius: 0.5rem;
    padding: 1rem;
}
.panel h2 {
    font-size: 1rem;
    font-weight: 500;
    color: var(--text-muted);
    margin-bottom: 0.75rem;
}
.metric { font-size: 2rem; font-weight: 700; }
.metric.positive { color: var(--success); }
.metric.negative { color: var(--danger); }
.metric-label { font-size: 0.875rem; color: var(--text-muted); }
table { width: 100%; border-collapse: collapse; }
th, td {
    text-align: left;
    padding: 0.75rem;
    border-bottom: 1px solid var(--border);
}
th { color: var(--text-muted); font-weight: 500; font-size: 0.875rem; }
.chart-container { display: flex; justify-content: center; padding: 1rem 0; }
.chart-container img { max-width: 100%; height: auto; border-radius: 0.25rem; }
footer {
    margin-top: 2rem;
    padding-top: 1rem;
    border-top: 1px solid var(--border);
    color: var(--text-muted);
    font-size: 0.875rem;
    text-align: center;
}
"""


class ReviewRequest(BaseModel):
    """Body of a manager's approve/disapprove request."""

    decision: str = Field(..., pattern="^(approve|disapprove)$")
    comment: str = ""
    reviewer_id: str | None = None


class UserUpdateRequest(BaseModel):
    """Body of an admin's edit to one user. Omitted fields are unchanged."""

    display_name: str | None = None
    role: str | None = Field(None, pattern="^(admin|manager|employee)$")
    manager_id: str | None = None
    is_active: bool | None = None
    editor_id: str | None = None


# =============================================================================
# Dependency Factory Functions
# =============================================================================


def get_storage() -> StorageManager:
    """
    Create and return a StorageManager instance for data access.

    A new instance per request means every request reads the latest
    snapshot export from disk.

    Returns:
        StorageManager bound to Config.get_storage_dir().
    """
    return StorageManager()


def get_aggregator() -> SessionAggregator:
    """SessionAggregator with the configured 480-minute workday."""
    return SessionAggregator()


def get_dashboard_presenter() -> DashboardPresenter:
    """
    Create and return a DashboardPresenter with dependencies.

    Business context: The presenter pattern keeps route handlers thin
    and lets tests exercise view logic without HTTP.

    Returns:
        DashboardPresenter with injected StorageManager and SessionAggregator.
    """
    return DashboardPresenter(get_storage(), get_aggregator())


def get_chart_presenter() -> ChartPresenter:
    """ChartPresenter with injected StorageManager and SessionAggregator."""
    return ChartPresenter(get_storage(), get_aggregator())


def get_now() -> datetime:
    """
    Current local time for navigation guards and "today" highlighting.

    Business context: The core never reads the clock. Keeping the read
    here means tests can pin "now" with app.dependency_overrides.
    """
    return datetime.now()


def _not_found(exc: KeyError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Not found: {exc.args[0]}")


def _bad_request(exc: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


# ============================================================================
# Full Page Routes
# ============================================================================


@router.get("/", response_class=HTMLResponse)
async def dashboard_page(
    presenter: Annotated[DashboardPresenter, Depends(get_dashboard_presenter)],
    now: Annotated[datetime, Depends(get_now)],
) -> HTMLResponse:
    """
    Render the analytics overview page for the current month.

    Business context: The landing page gives managers the team picture
    (productivity, status tallies, top performers, week-over-week) before
    drilling into an individual timesheet.

    Returns:
        HTMLResponse with summary panels, the daily activity chart and the
        top performers table.
    """
    analytics = presenter.get_analytics(None, None, None, now)
    html = _render_dashboard_html(analytics)
    return HTMLResponse(content=html, media_type="text/html; charset=utf-8")


# ============================================================================
# Chart Routes
# ============================================================================


@router.get("/charts/daily.png")
async def daily_chart(
    presenter: Annotated[ChartPresenter, Depends(get_chart_presenter)],
    user_id: Annotated[list[str] | None, Query()] = None,
    start: date | None = None,
    end: date | None = None,
) -> Response:
    """
    Generate and serve the daily active/idle chart as PNG image.

    Falls back to SVG placeholder if matplotlib is not installed.

    Args:
        user_id: Repeatable filter (?user_id=u1&user_id=u2). Omit for all.
        start: First day to include (YYYY-MM-DD).
        end: Last day to include (YYYY-MM-DD).

    Returns:
        Response with either:
        - PNG image bytes (media_type="image/png") when matplotlib available
        - SVG placeholder (media_type="image/svg+xml") as fallback
    """
    try:
        png_bytes = presenter.render_daily_productivity_chart(user_id, start, end)
        return Response(content=png_bytes, media_type="image/png")
    except ImportError:
        # matplotlib not installed - return placeholder
        return Response(
            content=_placeholder_chart_svg("Daily Activity"),
            media_type="image/svg+xml",
        )


# ============================================================================
# API Routes (JSON)
# ============================================================================


@router.get("/api/users")
async def api_users(
    presenter: Annotated[DashboardPresenter, Depends(get_dashboard_presenter)],
    viewer_id: str | None = None,
) -> dict[str, object]:
    """
    List users, optionally scoped to what one viewer may review.

    Args:
        viewer_id: Dashboard user. Omit for the full directory.

    Returns:
        {"users": [...]} sorted by display name.

    Raises:
        HTTPException: 404 if viewer_id is unknown.
    """
    if viewer_id is None:
        users = presenter.get_user_directory().users
    else:
        try:
            users = presenter.get_visible_users(viewer_id)
        except KeyError as e:
            raise _not_found(e) from e
    return {"users": [u.to_dict() for u in users]}


@router.patch("/api/users/{user_id}")
async def api_update_user(
    user_id: str,
    body: UserUpdateRequest,
    storage: Annotated[StorageManager, Depends(get_storage)],
) -> dict[str, object]:
    """
    Edit one user's name, role, manager or access.

    Promoting someone out of the employee role drops their manager. When
    editor_id is given, only admins may make the change.

    Returns:
        The updated user.

    Raises:
        HTTPException: 404 for unknown user/editor, 403 when the editor is
            not an admin, 400 for a blank name or a manager_id that is not
            a manager.

    Example:
        >>> # PATCH /api/users/u3
        >>> # {"is_active": true}
    """
    if body.editor_id is not None:
        editor = storage.get_user(body.editor_id)
        if editor is None:
            raise _not_found(KeyError(body.editor_id))
        if editor.role != Config.ROLE_ADMIN:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"{body.editor_id} may not edit users",
            )

    try:
        user = storage.update_user(
            user_id,
            display_name=body.display_name,
            role=body.role,
            manager_id=body.manager_id,
            is_active=body.is_active,
        )
    except KeyError as e:
        raise _not_found(e) from e
    except ValueError as e:
        raise _bad_request(e) from e

    return user.to_dict()


@router.get("/api/admin/users")
async def api_user_directory(
    presenter: Annotated[DashboardPresenter, Depends(get_dashboard_presenter)],
) -> dict[str, object]:
    """Full directory with active, revoked and per-role head counts."""
    return presenter.get_user_directory().to_dict()


@router.get("/api/timesheets/{user_id}/week")
async def api_week_timesheet(
    user_id: str,
    presenter: Annotated[DashboardPresenter, Depends(get_dashboard_presenter)],
    now: Annotated[datetime, Depends(get_now)],
    anchor: date | None = None,
    week_starts_on: str = Config.DEFAULT_WEEK_START,
) -> dict[str, object]:
    """
    Weekly timesheet review for one user.

    Args:
        user_id: Whose timesheet to show.
        anchor: Any day in the week (default: today).
        week_starts_on: "sunday" (default) or "monday".

    Returns:
        WeekReviewViewModel.to_dict() payload.

    Raises:
        HTTPException: 404 for unknown user, 400 for invalid week start.

    Example:
        >>> # GET /api/timesheets/u1/week?anchor=2024-01-10
        >>> # {"week": {"start": "2024-01-07", "end": "2024-01-13"}, ...}
    """
    try:
        review = presenter.get_week_review(user_id, anchor or now.date(), now, week_starts_on)
    except KeyError as e:
        raise _not_found(e) from e
    except ValueError as e:
        raise _bad_request(e) from e
    return review.to_dict()


@router.get("/api/timesheets/{user_id}/month")
async def api_month_timesheet(
    user_id: str,
    presenter: Annotated[DashboardPresenter, Depends(get_dashboard_presenter)],
    now: Annotated[datetime, Depends(get_now)],
    anchor: date | None = None,
    week_starts_on: str = Config.MONTH_GRID_WEEK_START,
) -> dict[str, object]:
    """
    Monthly calendar grid and target progress for one user.

    Raises:
        HTTPException: 404 for unknown user, 400 for invalid week start.
    """
    try:
        timesheet = presenter.get_monthly_timesheet(
            user_id, anchor or now.date(), now, week_starts_on
        )
    except KeyError as e:
        raise _not_found(e) from e
    except ValueError as e:
        raise _bad_request(e) from e
    return timesheet.to_dict()


@router.get("/api/analytics")
async def api_analytics(
    presenter: Annotated[DashboardPresenter, Depends(get_dashboard_presenter)],
    now: Annotated[datetime, Depends(get_now)],
    user_id: Annotated[list[str] | None, Query()] = None,
    start: date | None = None,
    end: date | None = None,
) -> dict[str, object]:
    """
    Team analytics over a date range.

    Args:
        user_id: Repeatable filter. Omit for every user.
        start: First day (default: first of the current month).
        end: Last day (default: today).

    Raises:
        HTTPException: 400 if start is after end.
    """
    try:
        analytics = presenter.get_analytics(user_id, start, end, now)
    except ValueError as e:
        raise _bad_request(e) from e
    return analytics.to_dict()


@router.get("/api/sessions/{session_id}")
async def api_session_detail(
    session_id: str,
    presenter: Annotated[DashboardPresenter, Depends(get_dashboard_presenter)],
) -> dict[str, object]:
    """
    One session with derived metrics and screenshots.

    Raises:
        HTTPException: 404 if no session has this id.
    """
    try:
        detail = presenter.get_session_detail(session_id)
    except KeyError as e:
        raise _not_found(e) from e
    return detail.to_dict(include_screenshots=True)


@router.post("/api/sessions/{session_id}/review")
async def api_review_session(
    session_id: str,
    body: ReviewRequest,
    storage: Annotated[StorageManager, Depends(get_storage)],
    presenter: Annotated[DashboardPresenter, Depends(get_dashboard_presenter)],
) -> dict[str, object]:
    """
    Approve or disapprove a session.

    When reviewer_id is given, the reviewer must be an admin or the
    session owner's manager.

    Returns:
        The reviewed session with its metrics.

    Raises:
        HTTPException: 404 for unknown session/reviewer, 403 when the
            reviewer may not review this owner, 400 for a disapproval
            without a reason or a session that is no longer
            awaiting review.

    Example:
        >>> # POST /api/sessions/s1/review
        >>> # {"decision": "disapprove", "comment": "Missing afternoon"}
    """
    if body.reviewer_id is not None:
        reviewer = storage.get_user(body.reviewer_id)
        if reviewer is None:
            raise _not_found(KeyError(body.reviewer_id))
        session = storage.get_session(session_id)
        if session is None:
            raise _not_found(KeyError(session_id))
        owner = storage.get_user(session.user_id)
        if owner is None or not can_review(reviewer, owner):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"{body.reviewer_id} may not review sessions of {session.user_id}",
            )

    try:
        reviewed = storage.review_session(session_id, body.decision, body.comment)
    except KeyError as e:
        raise _not_found(e) from e
    except ValueError as e:
        raise _bad_request(e) from e

    logger.info("Review recorded for %s: %s", session_id, reviewed.status)
    return presenter.get_session_detail(reviewed.id).to_dict()


# ============================================================================
# Template Rendering Helpers
# ============================================================================


def _placeholder_chart_svg(title: str) -> bytes:
    """
    Generate a placeholder SVG when matplotlib is unavailable.

    Args:
        title: Chart title to display in the placeholder.

    Returns:
        UTF-8 encoded SVG bytes with the text "{title} Chart (install matplotlib)".

    Example:
        >>> b'Daily Activity Chart' in _placeholder_chart_svg('Daily Activity')
        True
    """
    svg = f"""<svg xmlns="http://www.w3.org/2000/svg" width="400" height="200">
        <rect width="100%" height="100%" fill="#f1f5f9"/>
        <text x="50%" y="50%" text-anchor="middle" fill="#64748b" font-size="16">
            {title} Chart (install matplotlib)
        </text>
    </svg>"""
    return svg.encode("utf-8")


def _change_class(value: float) -> str:
    if value > 0:
        return "positive"
    if value < 0:
        return "negative"
    return ""


def _render_top_performers(analytics: AnalyticsViewModel) -> str:
    """
    Render the top performers leaderboard as an HTML table.

    Display names are escaped since they come from user documents.
    """
    rows = ""
    for row in analytics.top_performers:
        rows += f"""<tr>
            <td>#{row.rank}</td>
            <td>{escape(row.user.display_name)}</td>
            <td>{row.productivity_rate}%</td>
            <td>{format_minutes(row.summary.total_minutes)}</td>
            <td>{row.summary.total_sessions}</td>
        </tr>"""

    if not rows:
        rows = (
            '<tr><td colspan="5" style="text-align: center; '
            'color: var(--text-muted);">No sessions in range</td></tr>'
        )

    return f"""<table>
        <thead>
            <tr>
                <th>Rank</th>
                <th>User</th>
                <th>Productivity</th>
                <th>Tracked</th>
                <th>Sessions</th>
            </tr>
        </thead>
        <tbody>
            {rows}
        </tbody>
    </table>"""


def _render_dashboard_html(analytics: AnalyticsViewModel) -> str:
    """
    Render the complete analytics page from the view model.

    Returns:
        Complete HTML document with inline CSS.

    Example:
        >>> html = _render_dashboard_html(presenter.get_analytics(None, None, None, now))
        >>> '<!DOCTYPE html>' in html
        True
    """
    summary = analytics.summary
    weekly = analytics.weekly
    minutes_change = weekly.total_minutes_change if weekly else 0.0
    productivity_change = weekly.productivity_change if weekly else 0

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Timesheet Insights - Analytics</title>
    <style>
        {_DASHBOARD_CSS}
    </style>
</head>
<body>
    <div class="container">
        <header>
            <h1>Timesheet Insights</h1>
            <span class="range">
                {analytics.start.isoformat()} to {analytics.end.isoformat()}
            </span>
        </header>

        <div class="grid">
            <div class="panel">
                <h2>Productivity</h2>
                <div class="metric">{summary.productivity_rate}%</div>
                <div class="metric-label">
                    {format_minutes(summary.active_minutes)} active of
                    {format_minutes(summary.total_minutes)}
                </div>
            </div>
            <div class="panel">
                <h2>Sessions</h2>
                <div class="metric">{summary.total_sessions}</div>
                <div class="metric-label">
                    {summary.pending_count} pending &bull; {summary.approved_count} approved
                    &bull; {summary.disapproved_count} disapproved
                </div>
            </div>
            <div class="panel">
                <h2>Average per Day</h2>
                <div class="metric">{format_minutes(int(analytics.average_daily_minutes))}</div>
                <div class="metric-label">Target {format_minutes(Config.EXPECTED_DAILY_MINUTES)}</div>
            </div>
            <div class="panel">
                <h2>This Week vs Last</h2>
                <div class="metric {_change_class(minutes_change)}">{minutes_change:+.1f}%</div>
                <div class="metric-label">
                    Productivity {productivity_change:+d} pts
                </div>
            </div>
        </div>

        <div class="panel" style="margin-top: 1rem;">
            <h2>Daily Activity</h2>
            <div class="chart-container">
                <img src="/charts/daily.png?start={analytics.start.isoformat()}&end={analytics.end.isoformat()}"
                     alt="Daily Activity Chart">
            </div>
        </div>

        <div class="panel" style="margin-top: 1rem;">
            <h2>Top Performers</h2>
            {_render_top_performers(analytics)}
        </div>

        <footer>
            Timesheet Insights &bull; Powered by FastAPI
        </footer>
    </div>
</body>
</html>"""

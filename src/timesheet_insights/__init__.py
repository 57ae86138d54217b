"""
Timesheet Insights.

PURPOSE: Turn tracked work sessions into timesheet reviews and productivity analytics.
AI CONTEXT: This package provides a pure computation core plus a small web dashboard.

PACKAGE STRUCTURE:
- statistics.py: Session metrics, summaries, leaderboard (SessionAggregator)
- week_range.py: Week/month boundaries and navigation guards
- calendar_grid.py: Month and week calendar grids annotated with sessions
- access.py: Role-based user visibility (admin, manager)
- models.py: Data models (Session, User, derived view data)
- storage.py: JSON snapshot of sessions and users exported from the document store
- presenters.py: View models and charts for the dashboard
- web/: FastAPI dashboard
- config.py: Configuration constants

QUICK START:
    # Launch dashboard
    python -m timesheet_insights dashboard

    # Print a weekly report for one user
    python -m timesheet_insights report --user u1 --week 2024-01-10
"""

from timesheet_insights.__version__ import (
    __author__,
    __copyright__,
    __description__,
    __license__,
    __title__,
    __version__,
    __version_date__,
)

__all__ = [
    "__version__",
    "__version_date__",
    "__title__",
    "__description__",
    "__author__",
    "__license__",
    "__copyright__",
]

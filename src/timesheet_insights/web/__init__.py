"""
Web dashboard module for Timesheet Insights.

PURPOSE: FastAPI-based dashboard and JSON API over the timesheet snapshot.
AI CONTEXT: Thin HTTP edge - all calculations live in the core modules.

FEATURES:
- Analytics overview page
- Weekly and monthly timesheet JSON for the review UI
- Approve/disapprove endpoint
- Server-side chart rendering (matplotlib)

USAGE:
    # Via CLI
    timesheet-insights dashboard

    # Programmatically
    from timesheet_insights.web import create_app
    app = create_app()
"""

from .app import create_app, run_dashboard

__all__ = ["create_app", "run_dashboard"]

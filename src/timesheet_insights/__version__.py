"""Version information for timesheet-insights."""

__version__ = "1.0.0"
__version_date__ = "2026-10-19"

__title__ = "timesheet_insights"
__description__ = "Timesheet review and productivity analytics for time-tracking dashboards"

__author__ = "Timesheet Insights Team"

__license__ = "MIT"
__copyright__ = "Copyright 2026 Timesheet Insights Team"

__all__ = [
    "__version__",
    "__version_date__",
    "__title__",
    "__description__",
    "__author__",
    "__license__",
    "__copyright__",
]

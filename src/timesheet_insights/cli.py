"""
CLI entry point for Timesheet Insights.

PURPOSE: Command-line interface for the dashboard and text reports.
AI CONTEXT: Main entry points for package execution.

USAGE:
    # Via module
    python -m timesheet_insights dashboard

    # Or via CLI command (after install)
    timesheet-insights dashboard --port 8080
    timesheet-insights report --user u1 --week 2024-01-10
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date, datetime
from functools import lru_cache
from typing import TYPE_CHECKING

from .config import Config
from .week_range import WEEK_STARTS

if TYPE_CHECKING:
    from .statistics import SessionAggregator
    from .storage import StorageManager

# Constants
PROG_NAME = "timesheet-insights"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000


@lru_cache(maxsize=1)
def _get_logger() -> logging.Logger:
    """Get module logger (cached for thread safety)."""
    logging.basicConfig(level=logging.INFO)
    return logging.getLogger(__name__)


def _log(message: str, *, emoji: str = "") -> None:
    """Log message with optional emoji prefix for CLI output.

    Args:
        message: The message to log.
        emoji: Optional emoji prefix for visual CLI feedback.
    """
    prefix = f"{emoji} " if emoji else ""
    _get_logger().info(f"{prefix}{message}")


def _parse_week(value: str) -> date:
    """argparse type for --week: a YYYY-MM-DD date."""
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from e


def run_dashboard(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
    """
    Launch the web dashboard.

    Business context: The dashboard is where managers review weekly
    timesheets and approve or disapprove sessions.

    Args:
        host: Network interface to bind to. Default '127.0.0.1'.
        port: TCP port for the HTTP server. Default 8000.

    Raises:
        OSError: If port is already in use.

    Example:
        >>> # timesheet-insights dashboard --port 3000
        >>> run_dashboard(port=3000)
        🚀 Starting dashboard at http://127.0.0.1:3000
    """
    from .web import run_dashboard as start_web

    _log(f"Starting dashboard at http://{host}:{port}", emoji="🚀")
    _log(f"Reading timesheets from {Config.get_storage_dir()}")
    _log("Press Ctrl+C to stop")
    start_web(host=host, port=port)


def run_report(
    user_id: str,
    week: date | None = None,
    week_starts_on: str = Config.DEFAULT_WEEK_START,
    storage: StorageManager | None = None,
    aggregator: SessionAggregator | None = None,
    now: datetime | None = None,
) -> int:
    """
    Print one user's weekly timesheet report to stdout.

    Business context: Lets a manager paste a week's numbers into an email
    or script a Friday summary without opening the dashboard.

    Args:
        user_id: Whose timesheet to report.
        week: Any day in the week to report. Default: today.
        week_starts_on: "sunday" (default) or "monday".
        storage: Optional StorageManager for testability.
        aggregator: Optional SessionAggregator for testability.
        now: Optional current time for testability. Default: datetime.now().

    Returns:
        0 on success, 1 if the user is not in the directory.

    Example:
        >>> # timesheet-insights report --user u1 --week 2024-01-10 > week.txt
        >>> run_report("u1", date(2024, 1, 10))
        ==================================================
        WEEKLY TIMESHEET REPORT
        ...
    """
    from .statistics import SessionAggregator as Aggregator
    from .storage import StorageManager as StorageMgr

    storage = storage or StorageMgr()
    aggregator = aggregator or Aggregator()
    anchor = week or (now or datetime.now()).date()

    user = storage.get_user(user_id)
    if user is None:
        _log(f"Unknown user: {user_id}", emoji="❌")
        return 1

    report = aggregator.generate_summary_report(
        user, storage.get_user_sessions(user_id), anchor, week_starts_on
    )
    # Note: Using print() intentionally for stdout piping support
    print(report)
    return 0


def main() -> int:
    """
    Main CLI entry point for Timesheet Insights.

    Subcommands:
    - dashboard [--host HOST] [--port PORT]: Launch web dashboard
    - report --user USER [--week YYYY-MM-DD] [--week-start sunday|monday]

    Returns:
        Exit code. 0 for success, 1 for an unknown report user or a
        missing subcommand.

    Raises:
        SystemExit: On --help or argument parsing errors.

    Example:
        >>> sys.exit(main())
    """
    from .__version__ import __version__

    parser = argparse.ArgumentParser(
        prog=PROG_NAME,
        description="Timesheet Insights - productivity analytics for tracked work sessions",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Dashboard command
    dashboard_parser = subparsers.add_parser(
        "dashboard",
        help="Launch web dashboard",
    )
    dashboard_parser.add_argument(
        "--host",
        default=DEFAULT_HOST,
        help=f"Bind address (default: {DEFAULT_HOST})",
    )
    dashboard_parser.add_argument(
        "--port",
        type=int,
        default=DEFAULT_PORT,
        help=f"Port number (default: {DEFAULT_PORT})",
    )

    # Report command
    report_parser = subparsers.add_parser(
        "report",
        help="Print a weekly timesheet report to stdout",
    )
    report_parser.add_argument(
        "--user",
        required=True,
        help="User id to report on",
    )
    report_parser.add_argument(
        "--week",
        type=_parse_week,
        default=None,
        help="Any day in the week to report, YYYY-MM-DD (default: today)",
    )
    report_parser.add_argument(
        "--week-start",
        choices=WEEK_STARTS,
        default=Config.DEFAULT_WEEK_START,
        help=f"First day of the week (default: {Config.DEFAULT_WEEK_START})",
    )

    args = parser.parse_args()

    if args.command == "dashboard":
        run_dashboard(host=args.host, port=args.port)
        return 0
    if args.command == "report":
        return run_report(args.user, week=args.week, week_starts_on=args.week_start)

    parser.print_help()
    return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())

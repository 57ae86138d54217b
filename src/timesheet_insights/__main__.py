"""
Package entry point for python -m execution.

USAGE:
    python -m timesheet_insights dashboard                  # Launch web dashboard
    python -m timesheet_insights report --user u1           # Print weekly report
"""

import sys

from timesheet_insights.cli import main

if __name__ == "__main__":
    sys.exit(main())

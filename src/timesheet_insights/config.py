"""
Configuration for Timesheet Insights.

PURPOSE: Centralized configuration constants and runtime settings.
AI CONTEXT: All configurable values live here - modify this file to change behavior.

CONFIGURATION CATEGORIES:
- Workday: Expected daily minutes used as target denominator
- Sessions: Known lifecycle status values
- Performance: Rating tiers and their threshold rules
- Storage: Snapshot file names and directory

ENVIRONMENT VARIABLES:
- TIMESHEET_DATA_DIR: Directory holding sessions.json / users.json (default: .timesheets)

USAGE:
    from timesheet_insights.config import Config
    minutes = Config.EXPECTED_DAILY_MINUTES
    data_dir = Config.get_storage_dir()
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class Config:
    """
    Immutable configuration container for Timesheet Insights.

    DESIGN: Frozen dataclass ensures configuration immutability at runtime.
    All values are class-level constants - no instance creation needed.

    WORKDAY MODEL:
    - One expected workday is 8 hours (480 minutes) for every user
    - Weekends (Saturday, Sunday) are not working days
    - No holiday calendar and no per-user contracted hours

    STORAGE STRUCTURE:
        .timesheets/
        ├── sessions.json   # List of session documents
        └── users.json      # List of user documents
    """

    # =========================================================================
    # WORKDAY CONFIGURATION
    # =========================================================================
    EXPECTED_DAILY_MINUTES: ClassVar[int] = 480
    """Eight-hour workday used for target achievement and efficiency."""

    WORKING_WEEKDAYS: ClassVar[frozenset[int]] = frozenset({0, 1, 2, 3, 4})
    """Python weekday() values counted as working days (Monday-Friday)."""

    # =========================================================================
    # SESSION STATUS CONSTANTS
    # =========================================================================
    STATUS_SUBMITTED: ClassVar[str] = "submitted"
    STATUS_APPROVED: ClassVar[str] = "approved"
    STATUS_DISAPPROVED: ClassVar[str] = "disapproved"

    SESSION_STATUSES: ClassVar[frozenset[str]] = frozenset(
        {
            "submitted",
            "approved",
            "disapproved",
        }
    )

    # =========================================================================
    # USER ROLES
    # =========================================================================
    ROLE_ADMIN: ClassVar[str] = "admin"
    ROLE_MANAGER: ClassVar[str] = "manager"
    ROLE_EMPLOYEE: ClassVar[str] = "employee"

    USER_ROLES: ClassVar[frozenset[str]] = frozenset({"admin", "manager", "employee"})

    # =========================================================================
    # PERFORMANCE RATING
    # =========================================================================
    PERFORMANCE_RATINGS: ClassVar[tuple[str, ...]] = (
        "Excellent",
        "Good",
        "Average",
        "BelowAverage",
        "Poor",
    )

    RATING_RULES: ClassVar[tuple[tuple[str, int, int, bool], ...]] = (
        ("Excellent", 90, 80, True),
        ("Good", 80, 70, True),
        ("Average", 70, 60, True),
        ("BelowAverage", 60, 50, False),
    )
    """
    Ordered (rating, min_productivity, min_target_achievement, require_both).
    First matching rule wins; no match means "Poor". require_both=False
    means either threshold alone is enough.
    """

    FALLBACK_RATING: ClassVar[str] = "Poor"

    TOP_PERFORMERS_LIMIT: ClassVar[int] = 5

    # =========================================================================
    # CALENDAR
    # =========================================================================
    DEFAULT_WEEK_START: ClassVar[str] = "sunday"
    """Timesheet review weeks run Sunday-Saturday."""

    MONTH_GRID_WEEK_START: ClassVar[str] = "monday"
    """Monthly timesheet grid rows run Monday-Sunday."""

    # =========================================================================
    # STORAGE CONFIGURATION
    # =========================================================================
    STORAGE_DIR: ClassVar[str] = ".timesheets"
    SESSIONS_FILE: ClassVar[str] = "sessions.json"
    USERS_FILE: ClassVar[str] = "users.json"

    # =========================================================================
    # ENVIRONMENT-BASED SETTINGS (runtime configurable)
    # =========================================================================
    _storage_dir_override: ClassVar[str | None] = None

    @classmethod
    def get_storage_dir(cls) -> str:
        """
        Get the directory holding the sessions/users snapshot files.

        Uses a priority system: test override first, then the
        TIMESHEET_DATA_DIR environment variable, then STORAGE_DIR.

        Business context: The dashboard reads an export of the remote
        document store. Deployments point it at wherever that export
        lands without code changes.

        Returns:
            Directory path string.

        Example:
            >>> # With env var: TIMESHEET_DATA_DIR=/srv/exports
            >>> Config.get_storage_dir()
            '/srv/exports'
        """
        if cls._storage_dir_override is not None:
            return cls._storage_dir_override
        return os.environ.get("TIMESHEET_DATA_DIR", cls.STORAGE_DIR)

    @classmethod
    def set_test_overrides(cls, storage_dir: str | None = None) -> None:
        """
        Set test overrides for environment-based settings.

        Must call reset_test_overrides() in test teardown to avoid
        affecting other tests.

        Args:
            storage_dir: Override for the snapshot directory. None to clear.
        """
        cls._storage_dir_override = storage_dir

    @classmethod
    def reset_test_overrides(cls) -> None:
        """Reset all test overrides to use environment variables."""
        cls._storage_dir_override = None

    @classmethod
    def is_known_status(cls, status: str) -> bool:
        """
        Check whether a status is one of the three lifecycle values.

        Matching is exact: "Approved" or "pending" are not known statuses.

        Args:
            status: Raw status string from a session document.

        Returns:
            True if status is submitted, approved or disapproved.

        Example:
            >>> Config.is_known_status("approved")
            True
            >>> Config.is_known_status("pending")
            False
        """
        return status in cls.SESSION_STATUSES

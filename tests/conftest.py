"""
Pytest configuration and shared fixtures for Timesheet Insights tests.

This module contains:
- MockFileSystem: In-memory filesystem for testing without actual I/O
- A small team directory and a fortnight of sessions around 2024-01-10
- Shared fixtures available to all test modules

SAMPLE DATA (now = Wednesday 2024-01-10, Sunday-start week Jan 7-13):
    a1  Alice Admin     admin
    m1  Morgan Manager  manager
    u1  Uma Employee    employee, manager m1
    u2  Victor Worker   employee, manager m1
    u3  Wendy Outsider  employee, manager m2

    s1  u1  2024-01-08  450 total /  50 idle  submitted (2 screenshots)
    s2  u1  2024-01-09  480 total /  30 idle  approved
    s3  u1  2024-01-02  400 total / 100 idle  disapproved
    s4  u2  2024-01-10  300 total / 120 idle  submitted
    s5  u3  2024-01-09  480 total /   0 idle  approved
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

import pytest

from timesheet_insights.config import Config
from timesheet_insights.models import Session, User
from timesheet_insights.storage import StorageManager

DATA_DIR = "/data"
NOW = datetime(2024, 1, 10, 14, 30)


class MockFileSystem:
    """
    In-memory file system for testing.

    Simulates a file system using:
    - _files: dict mapping path -> content (str)
    - _dirs: set of directory paths
    - _read_only: paths whose writes raise PermissionError

    FEATURES:
    - No actual I/O operations
    - Easy to inspect state
    - Supports write-failure simulation
    """

    def __init__(self) -> None:
        self._files: dict[str, str] = {}
        self._dirs: set[str] = set()
        self._read_only: set[str] = set()

    def exists(self, path: str) -> bool:
        """
        Check if path exists in mock filesystem.

        Example:
            >>> fs = MockFileSystem()
            >>> fs.set_file('/data/sessions.json', '[]')
            >>> fs.exists('/data/sessions.json')
            True
        """
        return path in self._files or path in self._dirs

    def makedirs(self, path: str, exist_ok: bool = False) -> None:
        """
        Create mock directory and parent directories.

        Raises:
            OSError: If directory exists and exist_ok is False,
                or if path is an existing file.
        """
        if path in self._dirs:
            if not exist_ok:
                raise OSError(f"Directory exists: {path}")
            return

        if path in self._files:
            raise OSError(f"Path is a file, not directory: {path}")

        # Create all parent directories
        parts = path.rstrip("/").split("/")
        for i in range(1, len(parts) + 1):
            parent = "/".join(parts[:i])
            if parent:
                self._dirs.add(parent)

    def read_text(self, path: str, _encoding: str = "utf-8") -> str:
        """
        Read mock file contents.

        Raises:
            FileNotFoundError: If path not in _files.
        """
        if path not in self._files:
            raise FileNotFoundError(f"No such file: {path}")
        return self._files[path]

    def write_text(self, path: str, content: str, _encoding: str = "utf-8") -> None:
        """
        Write content to mock file, creating parent directories.

        Raises:
            PermissionError: If path is marked read-only.
        """
        if path in self._read_only:
            raise PermissionError(f"Permission denied: {path}")

        parent = "/".join(path.split("/")[:-1])
        if parent and parent not in self._dirs:
            self.makedirs(parent, exist_ok=True)

        self._files[path] = content

    def rename(self, src: str, dst: str) -> None:
        """
        Move a mock file, replacing the destination.

        Raises:
            FileNotFoundError: If src not in _files.
            PermissionError: If dst is marked read-only.
        """
        if src not in self._files:
            raise FileNotFoundError(f"No such file: {src}")
        if dst in self._read_only:
            raise PermissionError(f"Permission denied: {dst}")
        self._files[dst] = self._files.pop(src)

    # Test helpers

    def set_read_only(self, path: str) -> None:
        """Make subsequent writes/renames onto path fail with PermissionError."""
        self._read_only.add(path)

    def get_file(self, path: str) -> str | None:
        """Get file content or None, without raising."""
        return self._files.get(path)

    def set_file(self, path: str, content: str) -> None:
        """Set file content directly (delegates to write_text)."""
        self.write_text(path, content)

    def list_files(self) -> list[str]:
        """Sorted list of all file paths."""
        return sorted(self._files.keys())


# =============================================================================
# SAMPLE DOCUMENTS
# =============================================================================


def user_documents() -> list[dict[str, Any]]:
    """User directory in the document-store shape."""
    return [
        {"id": "a1", "fullName": "Alice Admin", "role": "admin", "email": "alice@example.com"},
        {"id": "m1", "fullName": "Morgan Manager", "role": "manager"},
        {"id": "u1", "fullName": "Uma Employee", "role": "employee", "managerId": "m1"},
        {"id": "u2", "fullName": "Victor Worker", "role": "employee", "managerId": "m1"},
        {
            "id": "u3",
            "fullName": "Wendy Outsider",
            "role": "employee",
            "managerId": "m2",
            "isActive": False,
        },
    ]


def session_documents() -> list[dict[str, Any]]:
    """Session documents in the shape written by the tracking client."""
    return [
        {
            "id": "s1",
            "userId": "u1",
            "userName": "Uma Employee",
            "date": "2024-01-08",
            "clockIn": "2024-01-08T09:00:00Z",
            "clockOut": "2024-01-08T16:30:00Z",
            "totalMinutes": 450,
            "idleMinutes": 50,
            "status": "submitted",
            "lessHoursComment": "Dentist at 4:30",
            "screenshots": [
                {"id": "shot1", "timestamp": "2024-01-08T10:00:00Z", "image": "data:image/png;base64,AAA"},
                {"id": "shot2", "timestamp": "2024-01-08T13:00:00Z", "image": "data:image/png;base64,BBB"},
            ],
            "deviceName": "uma-laptop",
        },
        {
            "id": "s2",
            "userId": "u1",
            "date": "2024-01-09",
            "clockIn": "2024-01-09T09:00:00Z",
            "clockOut": "2024-01-09T17:00:00Z",
            "totalMinutes": 480,
            "idleMinutes": 30,
            "status": "approved",
        },
        {
            "id": "s3",
            "userId": "u1",
            "date": "2024-01-02",
            "totalMinutes": 400,
            "idleMinutes": 100,
            "status": "disapproved",
            "managerComment": "Left early",
        },
        {
            "id": "s4",
            "userId": "u2",
            "date": "2024-01-10",
            "clockIn": "2024-01-10T08:00:00Z",
            "clockOut": "2024-01-10T13:00:00Z",
            "totalMinutes": 300,
            "idleMinutes": 120,
        },
        {
            "id": "s5",
            "userId": "u3",
            "date": "2024-01-09",
            "totalMinutes": 480,
            "idleMinutes": 0,
            "approvalStatus": "approved",
        },
    ]


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def mock_fs() -> MockFileSystem:
    """
    Create a MockFileSystem for testing.

    Provides a fresh in-memory filesystem instance for each test,
    ensuring test isolation without actual disk I/O.
    """
    return MockFileSystem()


@pytest.fixture
def seeded_fs(mock_fs: MockFileSystem) -> MockFileSystem:
    """MockFileSystem holding the sample users.json and sessions.json under /data."""
    mock_fs.set_file(f"{DATA_DIR}/{Config.USERS_FILE}", json.dumps(user_documents()))
    mock_fs.set_file(f"{DATA_DIR}/{Config.SESSIONS_FILE}", json.dumps(session_documents()))
    return mock_fs


@pytest.fixture
def sample_sessions() -> list[Session]:
    """The five sample sessions as Session models."""
    return [Session.from_dict(doc) for doc in session_documents()]


@pytest.fixture
def sample_users() -> list[User]:
    """The five sample users as User models."""
    return [User.from_dict(doc) for doc in user_documents()]


@pytest.fixture
def storage(seeded_fs: MockFileSystem) -> StorageManager:
    """StorageManager over the seeded in-memory snapshot."""
    return StorageManager(storage_dir=DATA_DIR, filesystem=seeded_fs)


@pytest.fixture
def now() -> datetime:
    """Fixed 'now': Wednesday 2024-01-10 14:30."""
    return NOW


@pytest.fixture
def config_overrides():
    """
    Reset Config test overrides after the test.

    Yields the Config class so tests can call set_test_overrides().
    """
    yield Config
    Config.reset_test_overrides()

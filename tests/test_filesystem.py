"""Tests for filesystem module and the MockFileSystem test double."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

# Add tests directory to path for conftest imports
sys.path.insert(0, str(Path(__file__).parent))

from conftest import MockFileSystem  # noqa: E402

from timesheet_insights.filesystem import RealFileSystem  # noqa: E402
from timesheet_insights.storage import StorageManager  # noqa: E402


class TestMockFileSystem:
    """Tests for MockFileSystem behaviour relied on by storage tests."""

    def test_initial_state_empty(self) -> None:
        fs = MockFileSystem()
        assert fs.list_files() == []
        assert fs.exists("/data") is False

    def test_makedirs_creates_parents(self) -> None:
        fs = MockFileSystem()
        fs.makedirs("/a/b/c")

        assert fs.exists("/a")
        assert fs.exists("/a/b/c")

    def test_makedirs_exist_ok_false_raises(self) -> None:
        fs = MockFileSystem()
        fs.makedirs("/data")

        with pytest.raises(OSError):
            fs.makedirs("/data")

    def test_read_missing_raises(self) -> None:
        with pytest.raises(FileNotFoundError):
            MockFileSystem().read_text("/data/sessions.json")

    def test_rename_replaces_destination(self) -> None:
        """Verifies rename moves content and removes the source.

        Business context:
        Review writes land in sessions.json.tmp and are renamed over the
        snapshot; the temp file must not linger.

        Assertion Strategy:
        Destination holds new content; source is gone.
        """
        fs = MockFileSystem()
        fs.set_file("/data/sessions.json", "old")
        fs.set_file("/data/sessions.json.tmp", "new")

        fs.rename("/data/sessions.json.tmp", "/data/sessions.json")

        assert fs.get_file("/data/sessions.json") == "new"
        assert fs.get_file("/data/sessions.json.tmp") is None

    def test_read_only_blocks_write_and_rename(self) -> None:
        fs = MockFileSystem()
        fs.set_file("/data/x.tmp", "x")
        fs.set_read_only("/data/x")

        with pytest.raises(PermissionError):
            fs.write_text("/data/x", "y")
        with pytest.raises(PermissionError):
            fs.rename("/data/x.tmp", "/data/x")


class TestRealFileSystem:
    """Tests for RealFileSystem against a temporary directory."""

    def test_write_read_rename(self, tmp_path: Path) -> None:
        fs = RealFileSystem()
        target = tmp_path / "nested" / "sessions.json"

        fs.makedirs(str(target.parent), exist_ok=True)
        fs.write_text(f"{target}.tmp", "[]")
        fs.rename(f"{target}.tmp", str(target))

        assert fs.exists(str(target))
        assert fs.exists(f"{target}.tmp") is False
        assert fs.read_text(str(target)) == "[]"

    def test_storage_on_disk(self, tmp_path: Path) -> None:
        """Verifies StorageManager works end to end on the real disk.

        Business context:
        Production reads the export directory with RealFileSystem.

        Arrangement:
        Empty temp directory, then one session document written to it.

        Action:
        Construct StorageManager, load and review the session.

        Assertion Strategy:
        Snapshot files created; review persisted in the JSON file.
        """
        storage = StorageManager(storage_dir=str(tmp_path))
        assert (tmp_path / "sessions.json").read_text() == "[]"

        (tmp_path / "sessions.json").write_text(
            json.dumps([{"id": "s1", "userId": "u1", "date": "2024-01-08", "totalMinutes": 60}])
        )
        storage.review_session("s1", "approve")

        saved = json.loads((tmp_path / "sessions.json").read_text())
        assert saved[0]["status"] == "approved"
        assert not (tmp_path / "sessions.json.tmp").exists()

"""
FileSystem abstraction for Timesheet Insights.

PURPOSE: Injectable file system interface for the snapshot store.
AI CONTEXT: Allows unit tests to exercise StorageManager against memory.

DESIGN:
- Protocol defines the five operations the store needs
- RealFileSystem delegates to os / open()
- MockFileSystem in tests/conftest.py keeps files in a dict

USAGE:
    # Production
    storage = StorageManager(filesystem=RealFileSystem())

    # Tests (MockFileSystem from conftest.py)
    storage = StorageManager(storage_dir="/data", filesystem=mock_fs)
"""

from __future__ import annotations

import os
from typing import Protocol

__all__ = ["FileSystem", "RealFileSystem"]


class FileSystem(Protocol):
    """
    Protocol for the file operations used by the snapshot store.

    All paths are strings. Implementations include RealFileSystem for
    production and MockFileSystem for tests.
    """

    def exists(self, path: str) -> bool:
        """Return True if path exists as a file or directory. Never raises."""
        ...

    def makedirs(self, path: str, exist_ok: bool = False) -> None:
        """
        Create a directory and its parents (like ``mkdir -p``).

        Raises:
            OSError: If the directory exists and exist_ok is False.
        """
        ...

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        """
        Read a whole file as text.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        ...

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        """
        Write text to a file, replacing existing content.

        Raises:
            PermissionError: If the file is read-only.
            OSError: If the parent directory is missing.
        """
        ...

    def rename(self, src: str, dst: str) -> None:
        """
        Move src to dst, replacing dst if it exists.

        Business context: The store writes review decisions to a temporary
        file and renames it over sessions.json so a crash mid-write never
        leaves a truncated snapshot.

        Raises:
            FileNotFoundError: If src does not exist.
        """
        ...


class RealFileSystem:
    """
    File system implementation backed by the local disk.

    Each method delegates directly to the corresponding os or built-in call.
    """

    def exists(self, path: str) -> bool:  # pragma: no cover
        return os.path.exists(path)

    def makedirs(self, path: str, exist_ok: bool = False) -> None:  # pragma: no cover
        os.makedirs(path, exist_ok=exist_ok)

    def read_text(self, path: str, encoding: str = "utf-8") -> str:  # pragma: no cover
        """
        Read file contents from disk as text.

        Args:
            path: Path to the file to read.
            encoding: Text encoding (default utf-8).

        Returns:
            File contents as a string.

        Raises:
            FileNotFoundError: If the file doesn't exist.
        """
        with open(path, encoding=encoding) as f:
            return f.read()

    def write_text(
        self, path: str, content: str, encoding: str = "utf-8"
    ) -> None:  # pragma: no cover
        """
        Write text content to a file on disk, overwriting it.

        Raises:
            PermissionError: If the file is read-only.
            OSError: If the parent directory doesn't exist.
        """
        with open(path, "w", encoding=encoding) as f:
            f.write(content)

    def rename(self, src: str, dst: str) -> None:  # pragma: no cover
        """Atomically replace dst with src (os.replace)."""
        os.replace(src, dst)

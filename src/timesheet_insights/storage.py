"""
Snapshot storage for Timesheet Insights.

PURPOSE: Read the sessions/users export of the document store and record reviews.
AI CONTEXT: All persistence goes through this module; the core never touches it.

STORAGE STRUCTURE:
    .timesheets/
    ├── sessions.json   # List: session documents (camelCase, as exported)
    └── users.json      # List: user documents

ERROR HANDLING STRATEGY:
- File not found: Return empty list
- JSON corruption or wrong shape: Log error, return empty list
- Malformed document (no id): Log warning, skip that document
- Write failure: Log error, return False
- Bad review or user edit (unknown id, bad decision or role, missing reason):
  raise KeyError / ValueError so the caller can report it

USAGE:
    # Production
    storage = StorageManager()

    # Testing with MockFileSystem
    storage = StorageManager(storage_dir="/test", filesystem=mock_fs)
"""

from __future__ import annotations

import json
import logging
import os
from typing import TYPE_CHECKING, Any

from .config import Config
from .filesystem import RealFileSystem
from .models import Session, User

if TYPE_CHECKING:
    from .filesystem import FileSystem

logger = logging.getLogger(__name__)

APPROVE = "approve"
DISAPPROVE = "disapprove"
REVIEW_DECISIONS = (APPROVE, DISAPPROVE)


class StorageManager:
    """
    JSON snapshot manager with comprehensive error handling.

    DESIGN PRINCIPLES:
    1. Fail-safe reads: Never crash the dashboard on I/O errors
    2. Predictable: Always return valid lists
    3. Atomic writes: Review decisions go through a temp file + rename
    4. Testable: FileSystem can be injected for mocking

    THREAD SAFETY:
    Not thread-safe. Single-writer assumed (one dashboard process).
    """

    def __init__(
        self,
        storage_dir: str | None = None,
        filesystem: FileSystem | None = None,
    ) -> None:
        """
        Initialize storage with directory structure.

        Args:
            storage_dir: Custom storage path. Default: Config.get_storage_dir()
            filesystem: FileSystem implementation. Default: RealFileSystem

        Creates:
            - Storage directory
            - Empty sessions.json / users.json if missing
        """
        self.storage_dir = storage_dir or Config.get_storage_dir()
        self._fs: FileSystem = filesystem or RealFileSystem()
        self.sessions_file = os.path.join(self.storage_dir, Config.SESSIONS_FILE)
        self.users_file = os.path.join(self.storage_dir, Config.USERS_FILE)

        self._initialize_storage()

    def _initialize_storage(self) -> None:
        """
        Create the directory and empty snapshot files.

        ERROR HANDLING:
        Logs errors but doesn't raise - allows degraded, read-only operation.
        """
        try:
            self._fs.makedirs(self.storage_dir, exist_ok=True)
            if not self._fs.exists(self.sessions_file):
                self._write_json(self.sessions_file, [])
            if not self._fs.exists(self.users_file):
                self._write_json(self.users_file, [])
            logger.info(f"Storage initialized: {self.storage_dir}")
        except OSError as e:
            logger.error(f"Failed to initialize storage: {e}")

    def _read_documents(self, file_path: str) -> list[dict[str, Any]]:
        """
        Read a JSON list of documents with error handling.

        A top-level object is accepted too (id -> document), since some
        exports key documents by id.

        Returns:
            List of dict documents. Empty list on any error.
        """
        try:
            content = self._fs.read_text(file_path)
            data = json.loads(content)
        except FileNotFoundError:
            return []
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in {file_path}: {e}")
            return []
        except OSError as e:
            logger.error(f"Error reading {file_path}: {e}")
            return []

        if isinstance(data, dict):
            data = [{"id": key, **value} for key, value in data.items() if isinstance(value, dict)]
        if not isinstance(data, list):
            logger.error(f"Unexpected JSON shape in {file_path}: {type(data).__name__}")
            return []
        return [doc for doc in data if isinstance(doc, dict)]

    def _write_json(self, file_path: str, data: Any) -> bool:
        """
        Write JSON through a temporary file and rename it into place.

        FORMATTING:
        - 2-space indent for readability
        - default=str for dates/datetimes

        Returns:
            True on success, False on failure.
        """
        tmp_path = f"{file_path}.tmp"
        try:
            content = json.dumps(data, indent=2, default=str)
            self._fs.write_text(tmp_path, content)
            self._fs.rename(tmp_path, file_path)
            return True
        except OSError as e:
            logger.error(f"Error writing {file_path}: {e}")
            return False

    # =========================================================================
    # SESSION OPERATIONS
    # =========================================================================

    def load_session_documents(self) -> list[dict[str, Any]]:
        """Raw session documents as stored."""
        return self._read_documents(self.sessions_file)

    def load_sessions(self) -> list[Session]:
        """
        Load all sessions as Session models.

        Documents without an id are skipped with a warning.

        Returns:
            List of Session. Empty list if unavailable.
        """
        sessions = []
        for doc in self.load_session_documents():
            try:
                sessions.append(Session.from_dict(doc))
            except KeyError:
                logger.warning(f"Skipping session document without id in {self.sessions_file}")
        return sessions

    def save_sessions(self, sessions: list[Session]) -> bool:
        """Replace the session snapshot. Returns True on success."""
        return self._write_json(self.sessions_file, [s.to_dict() for s in sessions])

    def get_session(self, session_id: str) -> Session | None:
        """
        Get a single session by id.

        Returns:
            Session or None if not found.
        """
        for session in self.load_sessions():
            if session.id == session_id:
                return session
        return None

    def get_user_sessions(self, user_id: str) -> list[Session]:
        """All sessions belonging to one user."""
        return [s for s in self.load_sessions() if s.user_id == user_id]

    def review_session(self, session_id: str, decision: str, comment: str = "") -> Session:
        """
        Record a manager's approve/disapprove decision on a session.

        Only sessions still awaiting review (status "submitted") can be
        decided; an approved or disapproved session is final.
        Approving clears any previous manager comment. Disapproving needs a
        non-blank reason, which is stored as the manager comment. The
        original document is updated in place so fields this package does
        not model survive the round trip.

        Business context: This is the only write the dashboard performs.
        Everything else is a read-only view over the export.

        Args:
            session_id: Id of the session under review.
            decision: "approve" or "disapprove".
            comment: Reason for disapproval (ignored when approving).

        Returns:
            The updated Session.

        Raises:
            ValueError: If decision is unknown, a disapproval has no reason,
                or the session is not in "submitted" status.
            KeyError: If no session has this id.
            OSError: If the snapshot could not be written.

        Example:
            >>> storage.review_session("s1", "disapprove", "Missing Friday afternoon")
            Session(id='s1', ..., status='disapproved', ...)
        """
        if decision not in REVIEW_DECISIONS:
            raise ValueError(f"decision must be one of {REVIEW_DECISIONS}, got {decision!r}")
        reason = comment.strip()
        if decision == DISAPPROVE and not reason:
            raise ValueError("A reason is required to disapprove a session")

        documents = self.load_session_documents()
        for doc in documents:
            if str(doc.get("id")) == session_id:
                break
        else:
            raise KeyError(session_id)

        current_status = Session.from_dict(doc).status
        if current_status != Config.STATUS_SUBMITTED:
            raise ValueError(
                f"Session {session_id} is {current_status}; only submitted sessions can be reviewed"
            )

        if decision == APPROVE:
            doc.update(
                status=Config.STATUS_APPROVED,
                approvalStatus=Config.STATUS_APPROVED,
                managerComment=None,
            )
        else:
            doc.update(
                status=Config.STATUS_DISAPPROVED,
                approvalStatus=Config.STATUS_DISAPPROVED,
                managerComment=reason,
            )

        if not self._write_json(self.sessions_file, documents):
            raise OSError(f"Could not save review for session {session_id}")

        logger.info(f"Session {session_id} {doc['status']}")
        return Session.from_dict(doc)

    # =========================================================================
    # USER OPERATIONS
    # =========================================================================

    def load_users(self) -> list[User]:
        """
        Load the user directory.

        Returns:
            List of User. Empty list if unavailable.
        """
        users = []
        for doc in self._read_documents(self.users_file):
            try:
                users.append(User.from_dict(doc))
            except KeyError:
                logger.warning(f"Skipping user document without id in {self.users_file}")
        return users

    def save_users(self, users: list[User]) -> bool:
        """Replace the user snapshot. Returns True on success."""
        return self._write_json(self.users_file, [u.to_dict() for u in users])

    def get_user(self, user_id: str) -> User | None:
        """Get a single user by id, or None."""
        for user in self.load_users():
            if user.id == user_id:
                return user
        return None

    def update_user(
        self,
        user_id: str,
        *,
        display_name: str | None = None,
        role: str | None = None,
        manager_id: str | None = None,
        is_active: bool | None = None,
    ) -> User:
        """
        Apply an admin's edit to one directory entry.

        Only employees report to a manager: changing someone to admin or
        manager clears their manager assignment, and an assigned manager
        must be a user with the manager role. Arguments left as None are
        unchanged; manager_id="" removes the assignment. Like
        review_session, the stored document is updated in place.

        Business context: Admins promote users, move employees between
        teams and revoke access without deleting the user's history.

        Args:
            user_id: Id of the user to edit.
            display_name: New full name. Blank names are rejected.
            role: "admin", "manager" or "employee".
            manager_id: Id of the new manager, or "" to unassign.
            is_active: False revokes dashboard and tracking access.

        Returns:
            The updated User.

        Raises:
            KeyError: If no user has this id.
            ValueError: If the role is unknown, the name is blank, or
                manager_id does not name a manager.
            OSError: If the snapshot could not be written.

        Example:
            >>> storage.update_user("u2", manager_id="m3")
            User(id='u2', ..., manager_id='m3', ...)
        """
        if role is not None and role not in Config.USER_ROLES:
            raise ValueError(f"role must be one of {sorted(Config.USER_ROLES)}, got {role!r}")
        if display_name is not None and not display_name.strip():
            raise ValueError("display_name must not be blank")

        documents = self._read_documents(self.users_file)
        for doc in documents:
            if str(doc.get("id")) == user_id:
                break
        else:
            raise KeyError(user_id)

        if manager_id:
            manager = next((d for d in documents if str(d.get("id")) == manager_id), None)
            if manager is None or manager.get("role") != Config.ROLE_MANAGER:
                raise ValueError(f"{manager_id!r} is not a manager")

        if display_name is not None:
            doc["fullName"] = display_name.strip()
        if role is not None:
            doc["role"] = role
        if manager_id is not None:
            doc.pop("manager_id", None)
            doc["managerId"] = manager_id or None
        if is_active is not None:
            doc["isActive"] = is_active
        if User.from_dict(doc).role != Config.ROLE_EMPLOYEE:
            doc.pop("manager_id", None)
            doc["managerId"] = None

        if not self._write_json(self.users_file, documents):
            raise OSError(f"Could not save changes for user {user_id}")

        logger.info(f"User {user_id} updated")
        return User.from_dict(doc)

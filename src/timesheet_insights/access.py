"""
Role-based visibility for the dashboard.

PURPOSE: Decide which users a dashboard viewer may review.
AI CONTEXT: Pure filtering over the user directory - no I/O.

RULES:
- admin: sees every user
- manager: sees users whose manager_id is the manager's id, never admins
- employee (or unknown role): sees nobody

USAGE:
    team = visible_users(viewer, users)
    allowed = can_review(viewer, owner)
"""

from __future__ import annotations

from collections.abc import Iterable

from .config import Config
from .models import User


def visible_users(viewer: User, users: Iterable[User]) -> list[User]:
    """
    Filter the directory down to the users ``viewer`` may review.

    Business context: Managers only approve timesheets for their own team.
    Admins oversee everyone, including other managers.

    Args:
        viewer: The signed-in dashboard user.
        users: Full user directory.

    Returns:
        Users sorted by display name, then id.

    Example:
        >>> [u.id for u in visible_users(manager, directory)]
        ['u2', 'u3']
    """
    if viewer.role == Config.ROLE_ADMIN:
        selected = list(users)
    elif viewer.role == Config.ROLE_MANAGER:
        selected = [
            u for u in users if u.manager_id == viewer.id and u.role != Config.ROLE_ADMIN
        ]
    else:
        selected = []
    return sorted(selected, key=lambda u: (u.display_name.lower(), u.id))


def can_review(viewer: User, owner: User) -> bool:
    """Check whether ``viewer`` may approve or disapprove ``owner``'s sessions."""
    if viewer.role == Config.ROLE_ADMIN:
        return True
    return (
        viewer.role == Config.ROLE_MANAGER
        and owner.manager_id == viewer.id
        and owner.role != Config.ROLE_ADMIN
    )


def role_counts(users: Iterable[User]) -> dict[str, int]:
    """
    Head counts for the user-management overview.

    Returns:
        Dict with total, active, revoked and one key per role
        (admin, manager, employee). Unknown roles count toward total only.
    """
    counts = {"total": 0, "active": 0, "revoked": 0}
    counts.update(dict.fromkeys(sorted(Config.USER_ROLES), 0))
    for user in users:
        counts["total"] += 1
        counts["active" if user.is_active else "revoked"] += 1
        if user.role in Config.USER_ROLES:
            counts[user.role] += 1
    return counts

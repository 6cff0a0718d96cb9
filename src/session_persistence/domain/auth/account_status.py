"""User account status lifecycle values."""

from __future__ import annotations

from enum import StrEnum


class AccountStatus(StrEnum):
    """Supported user account statuses."""

    ACTIVE = "active"
    BLOCKED = "blocked"
    REMOVED = "removed"

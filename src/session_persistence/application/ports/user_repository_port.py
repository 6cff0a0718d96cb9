"""Port for user lookup operations used by session and login services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID

from session_persistence.domain.auth.account_status import AccountStatus


@dataclass(frozen=True)
class UserRecord:
    """User persistence model."""

    user_id: UUID
    email: str
    password_hash: str
    account_status: AccountStatus
    created_at: datetime
    updated_at: datetime

    @property
    def is_active(self) -> bool:
        return self.account_status is AccountStatus.ACTIVE


class UserRepositoryPort(Protocol):
    """User repository contract."""

    async def get_by_id(self, *, user_id: UUID) -> UserRecord | None:
        """Return the current user by id, including non-active users."""

    async def get_by_email(self, *, email: str) -> UserRecord | None:
        """Return user by normalized email, including non-active users."""

"""Port for remember-me persistence record storage."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID

from session_persistence.domain.auth.persistence_policy import is_persistence_expired


class DuplicatePersistenceCodeError(ValueError):
    """Raised when a persistence record with the same code is already stored."""


@dataclass(frozen=True)
class PersistenceCreateInput:
    """Input payload for inserting a persistence record."""

    user_id: UUID
    code: str
    expires_at: datetime


@dataclass(frozen=True)
class PersistenceRecord:
    """Persisted remember-me record linking an opaque code to one user."""

    id: int
    user_id: UUID
    code: str
    created_at: datetime
    expires_at: datetime

    def is_expired(self, *, now: datetime) -> bool:
        return is_persistence_expired(expires_at=self.expires_at, now=now)


class PersistenceRepositoryPort(Protocol):
    """Persistence record storage contract."""

    async def get_by_code(self, *, code: str) -> PersistenceRecord | None:
        """Return the stored record for `code`, expired or not, or None."""

    async def create_persistence(self, payload: PersistenceCreateInput) -> PersistenceRecord:
        """Insert a record, raising `DuplicatePersistenceCodeError` on a code conflict."""

    async def delete_by_user(self, *, user_id: UUID) -> int:
        """Delete every record owned by one user and return the deleted count."""

    async def delete_by_code(self, *, code: str) -> int:
        """Delete the record matching `code`; zero when nothing matches."""

    async def delete_expired(self, *, now: datetime) -> int:
        """Delete every record expired at `now` and return the deleted count."""

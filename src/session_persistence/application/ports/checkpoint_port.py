"""Port for identity checkpoints guarding silent re-authentication."""

from __future__ import annotations

from typing import Protocol

from session_persistence.application.ports.user_repository_port import UserRecord


class CheckpointPort(Protocol):
    """Single identity checkpoint contract."""

    name: str

    async def pass_check(self, *, user: UserRecord) -> bool:
        """Return whether `user` may currently be re-authenticated silently."""


class CheckpointGatePort(Protocol):
    """Aggregate gate consulted before trusting a persistence record."""

    async def pass_check(self, *, user: UserRecord) -> bool:
        """Return whether silent re-authentication is currently permitted."""

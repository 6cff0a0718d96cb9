"""Checkpoint rejecting users whose account is not active."""

from __future__ import annotations

from session_persistence.application.ports.checkpoint_port import CheckpointPort
from session_persistence.application.ports.user_repository_port import UserRecord


class AccountStatusCheckpoint(CheckpointPort):
    """Only active accounts may be re-authenticated from a persistence record."""

    name = "account_status"

    async def pass_check(self, *, user: UserRecord) -> bool:
        return user.is_active

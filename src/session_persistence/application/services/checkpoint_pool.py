"""Checkpoint pool gating silent re-authentication from persistence records."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from session_persistence.application.ports.checkpoint_port import CheckpointPort
from session_persistence.application.ports.user_repository_port import UserRecord

logger = logging.getLogger(__name__)


class CheckpointPool:
    """Require every registered checkpoint to pass for one user."""

    def __init__(self, *, checkpoints: Sequence[CheckpointPort] = ()) -> None:
        self._checkpoints = tuple(checkpoints)

    async def pass_check(self, *, user: UserRecord) -> bool:
        """Run checkpoints in registration order and stop at the first rejection."""

        for checkpoint in self._checkpoints:
            if not await checkpoint.pass_check(user=user):
                logger.info(
                    "checkpoint_rejected checkpoint=%s user_id=%s",
                    checkpoint.name,
                    user.user_id,
                )
                return False
        return True

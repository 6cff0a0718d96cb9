"""Purge of expired remember-me persistence records."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from session_persistence.application.ports.persistence_repository_port import (
    PersistenceRepositoryPort,
)

logger = logging.getLogger(__name__)


class PersistenceCleanupService:
    """Delete persistence records whose lifetime has elapsed."""

    def __init__(
        self,
        *,
        persistences: PersistenceRepositoryPort,
        now_provider: Callable[[], datetime] | None = None,
    ) -> None:
        self._persistences = persistences
        self._now_provider = now_provider or (lambda: datetime.now(tz=UTC))

    async def purge_expired(self) -> int:
        """Delete expired records and return how many were removed."""

        now = self._now_provider()
        deleted = await self._persistences.delete_expired(now=now)
        logger.info("persistence_cleanup_completed deleted=%s cutoff=%s", deleted, now.isoformat())
        return deleted

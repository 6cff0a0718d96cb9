"""persistence-cleanup entrypoint purging expired remember-me records."""

from __future__ import annotations

import asyncio
import logging

from session_persistence.application.services.persistence_cleanup_service import (
    PersistenceCleanupService,
)
from session_persistence.config.settings import load_settings
from session_persistence.infrastructure.db.persistence_repository import (
    SqlAlchemyPersistenceRepository,
)
from session_persistence.infrastructure.db.session import create_engine_and_session_factory
from session_persistence.infrastructure.logging import configure_logging

logger = logging.getLogger(__name__)


async def run_cleanup(*, database_url: str) -> int:
    """Purge expired persistence records once and return the deleted count."""

    engine, session_factory = create_engine_and_session_factory(database_url)
    try:
        service = PersistenceCleanupService(
            persistences=SqlAlchemyPersistenceRepository(session_factory),
        )
        return await service.purge_expired()
    finally:
        await engine.dispose()


async def _run() -> None:
    settings = load_settings()
    configure_logging(level=settings.log_level)
    logger.info("persistence_cleanup_starting")
    deleted = await run_cleanup(database_url=settings.database_url)
    logger.info("persistence_cleanup_finished deleted=%s", deleted)


def main() -> None:
    """Run one expired-record cleanup pass."""

    asyncio.run(_run())


if __name__ == "__main__":
    main()

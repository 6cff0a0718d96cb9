"""SQLAlchemy adapter for remember-me persistence records."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any, cast
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from session_persistence.application.ports.persistence_repository_port import (
    DuplicatePersistenceCodeError,
    PersistenceCreateInput,
    PersistenceRecord,
    PersistenceRepositoryPort,
)
from session_persistence.infrastructure.db.metadata import persistences

logger = logging.getLogger(__name__)


def _is_duplicate_code_error(error: IntegrityError) -> bool:
    message = str(error.orig).lower()
    return "persistences.code" in message or "uq_persistences_code" in message


class SqlAlchemyPersistenceRepository(PersistenceRepositoryPort):
    """Persistence repository backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_by_code(self, *, code: str) -> PersistenceRecord | None:
        """Return the stored record matching `code`, expired or not."""

        statement = sa.select(*persistences.c).where(persistences.c.code == code).limit(1)

        async with self._session_factory() as session:
            result = await session.execute(statement)

        row = result.mappings().first()
        if row is None:
            return None
        return _to_persistence_record(row)

    async def create_persistence(self, payload: PersistenceCreateInput) -> PersistenceRecord:
        """Insert one record; a code already stored raises `DuplicatePersistenceCodeError`."""

        statement = (
            sa.insert(persistences)
            .values(
                user_id=payload.user_id,
                code=payload.code,
                expires_at=payload.expires_at,
            )
            .returning(*persistences.c)
        )

        async with self._session_factory() as session:
            try:
                result = await session.execute(statement)
                await session.commit()
            except IntegrityError as error:
                await session.rollback()
                if _is_duplicate_code_error(error):
                    logger.info("persistence_duplicate_code_rejected user_id=%s", payload.user_id)
                    raise DuplicatePersistenceCodeError("persistence code already exists") from error
                raise

        row = result.mappings().one()
        return _to_persistence_record(row)

    async def delete_by_user(self, *, user_id: UUID) -> int:
        """Delete every record owned by one user."""

        statement = sa.delete(persistences).where(persistences.c.user_id == user_id)
        return await self._execute_delete(statement)

    async def delete_by_code(self, *, code: str) -> int:
        """Delete the record matching `code`, if any."""

        statement = sa.delete(persistences).where(persistences.c.code == code)
        return await self._execute_delete(statement)

    async def delete_expired(self, *, now: datetime) -> int:
        """Delete every record whose `expires_at` is not after `now`."""

        statement = sa.delete(persistences).where(persistences.c.expires_at <= now)
        return await self._execute_delete(statement)

    async def _execute_delete(self, statement: sa.Delete) -> int:
        async with self._session_factory() as session:
            result = cast(CursorResult[Any], await session.execute(statement))
            await session.commit()

        return int(result.rowcount or 0)


def _to_persistence_record(row: sa.RowMapping) -> PersistenceRecord:
    raw_user_id = row["user_id"]
    user_id = raw_user_id if isinstance(raw_user_id, UUID) else UUID(str(raw_user_id))
    return PersistenceRecord(
        id=int(row["id"]),
        user_id=user_id,
        code=cast(str, row["code"]),
        created_at=_ensure_utc(cast(datetime, row["created_at"])),
        expires_at=_ensure_utc(cast(datetime, row["expires_at"])),
    )


def _ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value

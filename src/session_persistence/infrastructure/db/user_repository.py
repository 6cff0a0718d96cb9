"""SQLAlchemy adapter for user lookup queries."""

from __future__ import annotations

from datetime import datetime
from typing import Any, cast
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from session_persistence.application.ports.user_repository_port import (
    UserRecord,
    UserRepositoryPort,
)
from session_persistence.domain.auth.account_status import AccountStatus
from session_persistence.infrastructure.db.metadata import users

_USER_COLUMNS = (
    users.c.id,
    users.c.email,
    users.c.password_hash,
    users.c.account_status,
    users.c.created_at,
    users.c.updated_at,
)


class SqlAlchemyUserRepository(UserRepositoryPort):
    """User repository backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_by_id(self, *, user_id: UUID) -> UserRecord | None:
        """Return user by id, including non-active users."""

        statement = sa.select(*_USER_COLUMNS).where(users.c.id == user_id).limit(1)
        return await self._fetch_one(statement)

    async def get_by_email(self, *, email: str) -> UserRecord | None:
        """Return user by normalized email, including non-active users."""

        statement = sa.select(*_USER_COLUMNS).where(users.c.email == email).limit(1)
        return await self._fetch_one(statement)

    async def _fetch_one(self, statement: sa.Select[Any]) -> UserRecord | None:
        async with self._session_factory() as session:
            result = await session.execute(statement)

        row = result.mappings().first()
        if row is None:
            return None
        return _to_user_record(row)


def _to_user_record(row: sa.RowMapping) -> UserRecord:
    raw_user_id = row["id"]
    user_id = raw_user_id if isinstance(raw_user_id, UUID) else UUID(str(raw_user_id))
    return UserRecord(
        user_id=user_id,
        email=cast(str, row["email"]),
        password_hash=cast(str, row["password_hash"]),
        account_status=AccountStatus(cast(str, row["account_status"])),
        created_at=cast(datetime, row["created_at"]),
        updated_at=cast(datetime, row["updated_at"]),
    )

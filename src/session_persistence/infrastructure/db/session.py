"""Async SQLAlchemy engine and session factory helpers."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)


def create_engine_and_session_factory(
    database_url: str,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Create an async engine plus a session factory bound to it.

    Short-lived processes own the returned engine and must `dispose()` it
    before their event loop closes so pooled driver connections are released.
    """

    engine = create_async_engine(database_url)
    return engine, async_sessionmaker(engine, expire_on_commit=False)


def create_session_factory(database_url: str) -> async_sessionmaker[AsyncSession]:
    """Create a session factory whose engine lives as long as the process."""

    _, session_factory = create_engine_and_session_factory(database_url)
    return session_factory

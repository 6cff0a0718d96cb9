from __future__ import annotations

from pathlib import Path
from uuid import uuid4

import pytest
import sqlalchemy as sa
from alembic.config import Config
from sqlalchemy.ext.asyncio import AsyncEngine

from alembic import command
from apps.persistence_cleanup.main import run_cleanup


def _upgrade_head(tmp_path: Path, filename: str) -> tuple[str, str]:
    db_path = tmp_path / filename
    sync_url = f"sqlite+pysqlite:///{db_path}"
    async_url = f"sqlite+aiosqlite:///{db_path}"

    alembic_config = Config("alembic.ini")
    alembic_config.set_main_option("sqlalchemy.url", sync_url)
    command.upgrade(alembic_config, "head")

    return sync_url, async_url


def _seed_records(sync_url: str, *, codes_by_expiry: dict[str, str]) -> None:
    user_id = uuid4()
    with sa.create_engine(sync_url).begin() as connection:
        connection.execute(
            sa.text(
                "INSERT INTO users (id, email, password_hash, account_status) "
                "VALUES (:id, 'member@example.org', 'hash', 'active')"
            ),
            {"id": user_id.hex},
        )
        for code, expires_at in codes_by_expiry.items():
            connection.execute(
                sa.text(
                    "INSERT INTO persistences (user_id, code, expires_at) "
                    "VALUES (:user_id, :code, :expires_at)"
                ),
                {"user_id": user_id.hex, "code": code, "expires_at": expires_at},
            )


def _stored_codes(sync_url: str) -> set[str]:
    with sa.create_engine(sync_url).connect() as connection:
        rows = connection.execute(sa.text("SELECT code FROM persistences")).scalars().all()
    return set(rows)


@pytest.mark.asyncio
async def test_run_cleanup_purges_expired_records_and_disposes_engine(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "cleanup_run.db")
    _seed_records(
        sync_url,
        codes_by_expiry={
            "stale-one": "2000-01-01 00:00:00.000000",
            "stale-two": "2001-06-15 08:30:00.000000",
            "fresh": "2999-01-01 00:00:00.000000",
        },
    )

    disposed: list[AsyncEngine] = []
    original_dispose = AsyncEngine.dispose

    async def _recording_dispose(self: AsyncEngine, close: bool = True) -> None:
        disposed.append(self)
        await original_dispose(self, close=close)

    monkeypatch.setattr(AsyncEngine, "dispose", _recording_dispose)

    deleted = await run_cleanup(database_url=async_url)

    assert deleted == 2
    assert _stored_codes(sync_url) == {"fresh"}
    assert len(disposed) == 1


@pytest.mark.asyncio
async def test_run_cleanup_disposes_engine_when_purge_fails(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    db_path = tmp_path / "cleanup_unmigrated.db"
    disposed: list[AsyncEngine] = []
    original_dispose = AsyncEngine.dispose

    async def _recording_dispose(self: AsyncEngine, close: bool = True) -> None:
        disposed.append(self)
        await original_dispose(self, close=close)

    monkeypatch.setattr(AsyncEngine, "dispose", _recording_dispose)

    with pytest.raises(sa.exc.OperationalError):
        await run_cleanup(database_url=f"sqlite+aiosqlite:///{db_path}")

    assert len(disposed) == 1

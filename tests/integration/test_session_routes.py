from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from uuid import UUID, uuid4

import pytest
import sqlalchemy as sa
from alembic.config import Config
from fastapi.testclient import TestClient

from alembic import command
from apps.web_api.main import create_app
from session_persistence.infrastructure.http.cookie_session_driver import (
    PersistenceCookieSettings,
)
from session_persistence.infrastructure.security.password_hasher import BcryptPasswordHasher

COOKIE_NAME = "remember_token"
COOKIE_SETTINGS = PersistenceCookieSettings(
    name=COOKIE_NAME,
    max_age_seconds=3600,
    secure=False,
)
PASSWORD = "correct-password"


class SequenceCodeGenerator:
    def __init__(self, codes: Iterable[str]) -> None:
        self._codes = iter(codes)

    def generate(self, length: int) -> str:
        _ = length
        return next(self._codes)


def _upgrade_head(tmp_path: Path, filename: str) -> tuple[str, str]:
    db_path = tmp_path / filename
    sync_url = f"sqlite+pysqlite:///{db_path}"
    async_url = f"sqlite+aiosqlite:///{db_path}"

    alembic_config = Config("alembic.ini")
    alembic_config.set_main_option("sqlalchemy.url", sync_url)
    command.upgrade(alembic_config, "head")
    return sync_url, async_url


def _insert_user(sync_url: str, *, email: str) -> UUID:
    user_id = uuid4()
    password_hash = BcryptPasswordHasher(rounds=4).hash_password(PASSWORD)
    with sa.create_engine(sync_url).begin() as connection:
        connection.execute(
            sa.text(
                "INSERT INTO users (id, email, password_hash, account_status) "
                "VALUES (:id, :email, :password_hash, 'active')"
            ),
            {"id": user_id.hex, "email": email, "password_hash": password_hash},
        )
    return user_id


def _stored_codes(sync_url: str) -> set[str]:
    with sa.create_engine(sync_url).connect() as connection:
        rows = connection.execute(sa.text("SELECT code FROM persistences")).scalars().all()
    return set(rows)


def _build_client(async_url: str, *, codes: Iterable[str] = ()) -> TestClient:
    app = create_app(
        database_url=async_url,
        code_generator=SequenceCodeGenerator(codes),
        cookie_settings=COOKIE_SETTINGS,
    )
    return TestClient(app)


def _login(client: TestClient, *, email: str, remember: bool) -> None:
    response = client.post(
        "/login",
        json={"email": email, "password": PASSWORD, "remember": remember},
    )
    assert response.status_code == 200
    assert response.json()["authenticated"] is True


@pytest.mark.asyncio
async def test_remembered_login_restores_session_from_cookie(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "routes_remembered.db")
    user_id = _insert_user(sync_url, email="member@example.org")

    with _build_client(async_url, codes=["remembered-code"]) as client:
        login_response = client.post(
            "/login",
            json={"email": "member@example.org", "password": PASSWORD, "remember": True},
        )
        restored = client.get("/session")

    assert login_response.status_code == 200
    assert login_response.json() == {"authenticated": True, "user_id": str(user_id)}
    assert f"{COOKIE_NAME}=remembered-code" in login_response.headers["set-cookie"]
    assert restored.json() == {"authenticated": True, "user_id": str(user_id)}
    assert _stored_codes(sync_url) == {"remembered-code"}


@pytest.mark.asyncio
async def test_login_without_remember_issues_no_cookie(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "routes_ephemeral.db")
    _insert_user(sync_url, email="member@example.org")

    with _build_client(async_url) as client:
        login_response = client.post(
            "/login",
            json={"email": "member@example.org", "password": PASSWORD},
        )
        restored = client.get("/session")

    assert login_response.status_code == 200
    assert "set-cookie" not in login_response.headers
    assert restored.json() == {"authenticated": False, "user_id": None}
    assert _stored_codes(sync_url) == set()


@pytest.mark.asyncio
async def test_login_rejects_invalid_credentials(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "routes_invalid.db")
    _insert_user(sync_url, email="member@example.org")

    with _build_client(async_url, codes=["never-issued"]) as client:
        response = client.post(
            "/login",
            json={"email": "member@example.org", "password": "wrong", "remember": True},
        )

    assert response.status_code == 401
    assert "set-cookie" not in response.headers
    assert _stored_codes(sync_url) == set()


@pytest.mark.asyncio
async def test_unknown_cookie_is_anonymous(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "routes_unknown_cookie.db")

    with _build_client(async_url) as client:
        client.cookies.set(COOKIE_NAME, "forged-code")
        response = client.get("/session")

    assert response.json() == {"authenticated": False, "user_id": None}


@pytest.mark.asyncio
async def test_expired_record_does_not_restore_session(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "routes_expired.db")
    _insert_user(sync_url, email="member@example.org")

    with _build_client(async_url, codes=["expiring-code"]) as client:
        _login(client, email="member@example.org", remember=True)
        with sa.create_engine(sync_url).begin() as connection:
            connection.execute(
                sa.text("UPDATE persistences SET expires_at = '2000-01-01 00:00:00.000000'")
            )
        restored = client.get("/session")

    assert restored.json() == {"authenticated": False, "user_id": None}


@pytest.mark.asyncio
async def test_blocked_account_is_not_restored_but_keeps_record(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "routes_blocked.db")
    user_id = _insert_user(sync_url, email="member@example.org")

    with _build_client(async_url, codes=["blocked-code"]) as client:
        _login(client, email="member@example.org", remember=True)
        with sa.create_engine(sync_url).begin() as connection:
            connection.execute(
                sa.text("UPDATE users SET account_status = 'blocked' WHERE id = :id"),
                {"id": user_id.hex},
            )
        restored = client.get("/session")

    assert restored.json() == {"authenticated": False, "user_id": None}
    assert "set-cookie" not in restored.headers
    assert _stored_codes(sync_url) == {"blocked-code"}


@pytest.mark.asyncio
async def test_logout_removes_only_current_device_record(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "routes_logout_current.db")
    _insert_user(sync_url, email="member@example.org")

    with _build_client(async_url, codes=["laptop-code", "phone-code"]) as client:
        _login(client, email="member@example.org", remember=True)
        client.cookies.clear()
        _login(client, email="member@example.org", remember=True)
        client.cookies.clear()
        client.cookies.set(COOKIE_NAME, "laptop-code")
        logout_response = client.post("/logout")
        after_logout = client.get("/session")

    assert logout_response.status_code == 204
    assert f'{COOKIE_NAME}=""' in logout_response.headers["set-cookie"]
    assert after_logout.json() == {"authenticated": False, "user_id": None}
    assert _stored_codes(sync_url) == {"phone-code"}


@pytest.mark.asyncio
async def test_logout_everywhere_removes_every_record(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "routes_logout_all.db")
    _insert_user(sync_url, email="member@example.org")
    _insert_user(sync_url, email="other@example.org")

    with _build_client(async_url, codes=["other-code", "phone-code", "laptop-code"]) as client:
        _login(client, email="other@example.org", remember=True)
        client.cookies.clear()
        _login(client, email="member@example.org", remember=True)
        client.cookies.clear()
        _login(client, email="member@example.org", remember=True)
        logout_response = client.post("/logout", json={"destroy_all": True})

    assert logout_response.status_code == 204
    assert _stored_codes(sync_url) == {"other-code"}


@pytest.mark.asyncio
async def test_anonymous_logout_still_clears_cookie(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "routes_logout_anonymous.db")

    with _build_client(async_url) as client:
        client.cookies.set(COOKIE_NAME, "forged-code")
        response = client.post("/logout")

    assert response.status_code == 204
    assert f'{COOKIE_NAME}=""' in response.headers["set-cookie"]


@pytest.mark.asyncio
async def test_login_as_other_user_without_remember_drops_previous_remember_cookie(
    tmp_path: Path,
) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "routes_switch_user.db")
    _insert_user(sync_url, email="alice@example.org")
    bob_id = _insert_user(sync_url, email="bob@example.org")

    with _build_client(async_url, codes=["alice-code"]) as client:
        _login(client, email="alice@example.org", remember=True)
        bob_login = client.post(
            "/login",
            json={"email": "bob@example.org", "password": PASSWORD, "remember": False},
        )
        restored = client.get("/session")

    assert bob_login.json() == {"authenticated": True, "user_id": str(bob_id)}
    assert f'{COOKIE_NAME}=""' in bob_login.headers["set-cookie"]
    assert restored.json() == {"authenticated": False, "user_id": None}
    assert _stored_codes(sync_url) == set()


@pytest.mark.asyncio
async def test_remembered_relogin_replaces_carried_record(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "routes_relogin.db")
    _insert_user(sync_url, email="alice@example.org")
    bob_id = _insert_user(sync_url, email="bob@example.org")

    with _build_client(async_url, codes=["alice-code", "bob-code"]) as client:
        _login(client, email="alice@example.org", remember=True)
        _login(client, email="bob@example.org", remember=True)
        restored = client.get("/session")

    assert restored.json() == {"authenticated": True, "user_id": str(bob_id)}
    assert _stored_codes(sync_url) == {"bob-code"}

"""web-api entrypoint and HTTP route wiring."""

from __future__ import annotations

import logging
from datetime import timedelta

import uvicorn
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from session_persistence.application.ports.code_generator_port import CodeGeneratorPort
from session_persistence.application.ports.session_driver_port import SessionDriverPort
from session_persistence.application.services.auth_service import AuthService
from session_persistence.application.services.checkpoint_pool import CheckpointPool
from session_persistence.application.services.session_persistence_service import (
    SessionPersistenceService,
)
from session_persistence.config.settings import Settings, load_settings
from session_persistence.domain.auth.persistence_policy import (
    PERSISTENCE_CODE_LENGTH,
    PERSISTENCE_CODE_MAX_ATTEMPTS,
    PERSISTENCE_LIFETIME,
)
from session_persistence.infrastructure.checkpoints.account_status_checkpoint import (
    AccountStatusCheckpoint,
)
from session_persistence.infrastructure.db.persistence_repository import (
    SqlAlchemyPersistenceRepository,
)
from session_persistence.infrastructure.db.session import create_session_factory
from session_persistence.infrastructure.db.user_repository import SqlAlchemyUserRepository
from session_persistence.infrastructure.http.cookie_session_driver import (
    PersistenceCookieSettings,
)
from session_persistence.infrastructure.http.session_router import (
    SessionPersistenceFactory,
    build_session_router,
)
from session_persistence.infrastructure.logging import configure_logging
from session_persistence.infrastructure.security.code_generator import SecretCodeGenerator
from session_persistence.infrastructure.security.password_hasher import BcryptPasswordHasher

WEB_API_HOST = "0.0.0.0"
WEB_API_PORT = 8000
logger = logging.getLogger(__name__)


def build_session_persistence_factory(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    code_generator: CodeGeneratorPort | None = None,
    code_length: int = PERSISTENCE_CODE_LENGTH,
    lifetime: timedelta = PERSISTENCE_LIFETIME,
    max_code_attempts: int = PERSISTENCE_CODE_MAX_ATTEMPTS,
) -> SessionPersistenceFactory:
    """Return a factory building one session persistence service per request driver."""

    users = SqlAlchemyUserRepository(session_factory)
    persistences = SqlAlchemyPersistenceRepository(session_factory)
    checkpoints = CheckpointPool(checkpoints=[AccountStatusCheckpoint()])
    resolved_code_generator = code_generator or SecretCodeGenerator()

    def _factory(session_driver: SessionDriverPort) -> SessionPersistenceService:
        return SessionPersistenceService(
            users=users,
            persistences=persistences,
            code_generator=resolved_code_generator,
            session_driver=session_driver,
            checkpoints=checkpoints,
            code_length=code_length,
            lifetime=lifetime,
            max_code_attempts=max_code_attempts,
        )

    return _factory


def build_cookie_settings(settings: Settings) -> PersistenceCookieSettings:
    """Derive remember-me cookie attributes from runtime settings."""

    return PersistenceCookieSettings(
        name=settings.persistence_cookie_name,
        max_age_seconds=int(settings.persistence_lifetime.total_seconds()),
        secure=settings.persistence_cookie_secure,
    )


def create_app(
    *,
    database_url: str | None = None,
    code_generator: CodeGeneratorPort | None = None,
    cookie_settings: PersistenceCookieSettings | None = None,
) -> FastAPI:
    """Create FastAPI app exposing login, session bootstrap, and logout routes."""

    code_length = PERSISTENCE_CODE_LENGTH
    lifetime = PERSISTENCE_LIFETIME
    max_code_attempts = PERSISTENCE_CODE_MAX_ATTEMPTS
    if database_url is None or cookie_settings is None:
        settings = load_settings()
        configure_logging(level=settings.log_level)
        code_length = settings.persistence_code_length
        lifetime = settings.persistence_lifetime
        max_code_attempts = settings.persistence_code_max_attempts
        if database_url is None:
            database_url = settings.database_url
        if cookie_settings is None:
            cookie_settings = build_cookie_settings(settings)

    assert database_url is not None
    assert cookie_settings is not None

    session_factory = create_session_factory(database_url)
    auth_service = AuthService(
        users=SqlAlchemyUserRepository(session_factory),
        password_hasher=BcryptPasswordHasher(),
    )

    app = FastAPI()
    app.include_router(
        build_session_router(
            auth_service=auth_service,
            session_persistence_factory=build_session_persistence_factory(
                session_factory,
                code_generator=code_generator,
                code_length=code_length,
                lifetime=lifetime,
                max_code_attempts=max_code_attempts,
            ),
            cookie_settings=cookie_settings,
        )
    )
    logger.info("web_api_app_created cookie_name=%s", cookie_settings.name)
    return app


def run_asgi_server(*, host: str = WEB_API_HOST, port: int = WEB_API_PORT) -> None:
    """Run web-api as a long-lived ASGI process using application factory mode."""

    uvicorn.run(
        "apps.web_api.main:create_app",
        host=host,
        port=port,
        factory=True,
    )


def main() -> None:
    """Run web-api runtime process."""

    run_asgi_server()


if __name__ == "__main__":
    main()

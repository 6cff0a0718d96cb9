"""Session persistence service for remember-me session lifecycle.

The service decides, per request, whether a session is bound to a user and
whether that session is backed by a durable persistence record. The record's
opaque code travels with the request through a `SessionDriverPort`
(typically a cookie). Every failed resurrection check collapses to an
anonymous session; only code allocation can raise.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from session_persistence.application.dto.session_models import (
    AnonymousSession,
    AuthenticatedSession,
    Session,
)
from session_persistence.application.ports.checkpoint_port import CheckpointGatePort
from session_persistence.application.ports.code_generator_port import CodeGeneratorPort
from session_persistence.application.ports.persistence_repository_port import (
    DuplicatePersistenceCodeError,
    PersistenceCreateInput,
    PersistenceRecord,
    PersistenceRepositoryPort,
)
from session_persistence.application.ports.session_driver_port import SessionDriverPort
from session_persistence.application.ports.user_repository_port import (
    UserRecord,
    UserRepositoryPort,
)
from session_persistence.domain.auth.persistence_policy import (
    PERSISTENCE_CODE_LENGTH,
    PERSISTENCE_CODE_MAX_ATTEMPTS,
    PERSISTENCE_LIFETIME,
    compute_expires_at,
)

logger = logging.getLogger(__name__)


class PersistenceCodeAllocationError(RuntimeError):
    """Raised when no unique persistence code could be allocated."""

    def __init__(self, *, attempts: int) -> None:
        super().__init__(f"could not allocate a unique persistence code after {attempts} attempts")
        self.attempts = attempts


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class SessionPersistenceService:
    """Create, restore, and destroy sessions backed by persistence records."""

    def __init__(
        self,
        *,
        users: UserRepositoryPort,
        persistences: PersistenceRepositoryPort,
        code_generator: CodeGeneratorPort,
        session_driver: SessionDriverPort,
        checkpoints: CheckpointGatePort,
        code_length: int = PERSISTENCE_CODE_LENGTH,
        lifetime: timedelta = PERSISTENCE_LIFETIME,
        max_code_attempts: int = PERSISTENCE_CODE_MAX_ATTEMPTS,
        now_provider: Callable[[], datetime] = _utc_now,
    ) -> None:
        if max_code_attempts < 1:
            raise ValueError("max_code_attempts must be at least 1")
        self._users = users
        self._persistences = persistences
        self._code_generator = code_generator
        self._session_driver = session_driver
        self._checkpoints = checkpoints
        self._code_length = code_length
        self._lifetime = lifetime
        self._max_code_attempts = max_code_attempts
        self._now_provider = now_provider

    async def create_from_user(self, *, user: UserRecord, remember: bool) -> Session:
        """Create a session for `user`, issuing a persistence record when remembered."""

        if not remember:
            return AuthenticatedSession(user=user)

        persistence = await self._create_unique_persistence(user=user)
        self._session_driver.set(persistence.code)
        logger.info(
            "persistence_created user_id=%s persistence_id=%s expires_at=%s",
            user.user_id,
            persistence.id,
            persistence.expires_at.isoformat(),
        )
        return AuthenticatedSession(user=user)

    async def create_from_persistence_storage(self) -> Session:
        """Restore a session from the carried persistence code or return an empty one."""

        code = self._session_driver.get()
        if not code:
            return self.create_empty()

        persistence = await self._persistences.get_by_code(code=code)
        if persistence is None:
            logger.info("persistence_restore_denied reason=unknown_code")
            return self.create_empty()

        if persistence.is_expired(now=self._now_provider()):
            logger.info(
                "persistence_restore_denied reason=expired persistence_id=%s",
                persistence.id,
            )
            return self.create_empty()

        user = await self._users.get_by_id(user_id=persistence.user_id)
        if user is None:
            logger.info(
                "persistence_restore_denied reason=unknown_user persistence_id=%s user_id=%s",
                persistence.id,
                persistence.user_id,
            )
            return self.create_empty()

        # A rejected checkpoint may be transient, so the record and carried code stay.
        if not await self._checkpoints.pass_check(user=user):
            logger.info(
                "persistence_restore_denied reason=checkpoint persistence_id=%s user_id=%s",
                persistence.id,
                user.user_id,
            )
            return self.create_empty()

        return AuthenticatedSession(user=user)

    async def destroy(self, *, user: UserRecord, destroy_all: bool) -> None:
        """Remove the current (or every) persistence record of `user` and clear the carrier."""

        if destroy_all:
            deleted = await self._persistences.delete_by_user(user_id=user.user_id)
            logger.info("persistence_destroyed_all user_id=%s deleted=%s", user.user_id, deleted)
        else:
            code = self._session_driver.get()
            if code:
                deleted = await self._persistences.delete_by_code(code=code)
                logger.info(
                    "persistence_destroyed_current user_id=%s deleted=%s",
                    user.user_id,
                    deleted,
                )

        self._session_driver.forget()

    def create_empty(self) -> AnonymousSession:
        """Return a session without a bound user."""

        return AnonymousSession()

    async def _create_unique_persistence(self, *, user: UserRecord) -> PersistenceRecord:
        """Generate codes until one is stored, bounded by `max_code_attempts`."""

        for attempt in range(1, self._max_code_attempts + 1):
            code = self._code_generator.generate(self._code_length)
            if await self._persistences.get_by_code(code=code) is not None:
                logger.warning(
                    "persistence_code_collision user_id=%s attempt=%s",
                    user.user_id,
                    attempt,
                )
                continue

            expires_at = compute_expires_at(
                issued_at=self._now_provider(),
                lifetime=self._lifetime,
            )
            try:
                return await self._persistences.create_persistence(
                    PersistenceCreateInput(
                        user_id=user.user_id,
                        code=code,
                        expires_at=expires_at,
                    )
                )
            except DuplicatePersistenceCodeError:
                logger.warning(
                    "persistence_code_conflict_on_create user_id=%s attempt=%s",
                    user.user_id,
                    attempt,
                )

        logger.error(
            "persistence_code_allocation_failed user_id=%s attempts=%s",
            user.user_id,
            self._max_code_attempts,
        )
        raise PersistenceCodeAllocationError(attempts=self._max_code_attempts)

"""Login credential verification used by the HTTP boundary before session creation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from session_persistence.application.ports.password_hasher_port import PasswordHasherPort
from session_persistence.application.ports.user_repository_port import (
    UserRecord,
    UserRepositoryPort,
)
from session_persistence.domain.auth.credentials import normalize_login_email

logger = logging.getLogger(__name__)


class AuthOutcome(StrEnum):
    """Supported login outcomes."""

    SUCCESS = "success"
    INVALID_CREDENTIALS = "invalid_credentials"
    INACTIVE_USER = "inactive_user"


@dataclass(frozen=True)
class AuthResult:
    """Login result model."""

    outcome: AuthOutcome
    user: UserRecord | None = None


class AuthService:
    """Verify email/password credentials against stored users."""

    def __init__(
        self,
        *,
        users: UserRepositoryPort,
        password_hasher: PasswordHasherPort,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher

    async def authenticate(self, *, email: str, password: str) -> AuthResult:
        """Return the authenticated user or the reason the login was refused."""

        try:
            normalized_email = normalize_login_email(email=email)
        except ValueError:
            return AuthResult(outcome=AuthOutcome.INVALID_CREDENTIALS)

        user = await self._users.get_by_email(email=normalized_email)
        if user is None:
            logger.info("login_failed reason=unknown_email")
            return AuthResult(outcome=AuthOutcome.INVALID_CREDENTIALS)

        if not user.is_active:
            logger.info(
                "login_blocked user_id=%s account_status=%s",
                user.user_id,
                user.account_status.value,
            )
            return AuthResult(outcome=AuthOutcome.INACTIVE_USER)

        if not self._password_hasher.verify_password(
            password=password,
            password_hash=user.password_hash,
        ):
            logger.info("login_failed reason=invalid_password user_id=%s", user.user_id)
            return AuthResult(outcome=AuthOutcome.INVALID_CREDENTIALS)

        logger.info("login_success user_id=%s", user.user_id)
        return AuthResult(outcome=AuthOutcome.SUCCESS, user=user)

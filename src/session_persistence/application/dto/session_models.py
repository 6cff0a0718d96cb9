"""Session outcome models produced by the session persistence service.

A session is a decision output for one request and is never persisted. It is
either bound to a user (`AuthenticatedSession`) or anonymous
(`AnonymousSession`); callers branch on the concrete type, e.g. with `match`.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from session_persistence.application.ports.user_repository_port import UserRecord


@dataclass(frozen=True)
class AuthenticatedSession:
    """Session bound to one resolved user."""

    user: UserRecord

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def user_id(self) -> UUID:
        return self.user.user_id


@dataclass(frozen=True)
class AnonymousSession:
    """Session without a bound user."""

    @property
    def is_authenticated(self) -> bool:
        return False

    @property
    def user_id(self) -> None:
        return None


Session = AuthenticatedSession | AnonymousSession

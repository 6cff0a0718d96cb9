"""Cookie-backed carrier for the remember-me persistence code."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum

from fastapi import Response

from session_persistence.application.ports.session_driver_port import SessionDriverPort


@dataclass(frozen=True)
class PersistenceCookieSettings:
    """Attributes of the cookie carrying the persistence code."""

    name: str = "remember_token"
    max_age_seconds: int = 30 * 24 * 60 * 60
    secure: bool = True
    path: str = "/"


class _PendingCookieChange(StrEnum):
    SET = "set"
    FORGET = "forget"


class CookieSessionDriver(SessionDriverPort):
    """Request-scoped driver reading the inbound cookie and staging outbound changes.

    `set` and `forget` only record the change; `apply` writes it onto the
    response once the handler has built one.
    """

    def __init__(
        self,
        *,
        request_cookies: Mapping[str, str],
        cookie_settings: PersistenceCookieSettings,
    ) -> None:
        self._cookie_settings = cookie_settings
        raw_code = request_cookies.get(cookie_settings.name, "").strip()
        self._code: str | None = raw_code or None
        self._pending: _PendingCookieChange | None = None

    def get(self) -> str | None:
        return self._code

    def set(self, code: str) -> None:
        self._code = code
        self._pending = _PendingCookieChange.SET

    def forget(self) -> None:
        self._code = None
        self._pending = _PendingCookieChange.FORGET

    def apply(self, response: Response) -> None:
        """Write the staged cookie change, if any, onto `response`."""

        settings = self._cookie_settings
        if self._pending is _PendingCookieChange.SET and self._code is not None:
            response.set_cookie(
                key=settings.name,
                value=self._code,
                max_age=settings.max_age_seconds,
                path=settings.path,
                secure=settings.secure,
                httponly=True,
                samesite="lax",
            )
        elif self._pending is _PendingCookieChange.FORGET:
            response.delete_cookie(
                key=settings.name,
                path=settings.path,
                secure=settings.secure,
                httponly=True,
                samesite="lax",
            )

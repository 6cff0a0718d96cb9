"""Port for the carrier holding the current request's persistence code."""

from __future__ import annotations

from typing import Protocol


class SessionDriverPort(Protocol):
    """Request-scoped persistence code carrier (cookie, header, ...)."""

    def get(self) -> str | None:
        """Return the code carried by the current request, if any."""

    def set(self, code: str) -> None:
        """Store `code` for the current request/response context."""

    def forget(self) -> None:
        """Clear any carried code. Calling it repeatedly is harmless."""

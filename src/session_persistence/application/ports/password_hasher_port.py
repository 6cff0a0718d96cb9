"""Port for password hashing and verification at the login boundary."""

from __future__ import annotations

from typing import Protocol


class PasswordHasherPort(Protocol):
    """Password hashing/verification contract."""

    def hash_password(self, password: str) -> str:
        """Hash a plaintext password for storage."""

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        """Return whether `password` matches `password_hash`."""

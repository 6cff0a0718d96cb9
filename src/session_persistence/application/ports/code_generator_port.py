"""Port for opaque persistence code generation."""

from __future__ import annotations

from typing import Protocol


class CodeGeneratorPort(Protocol):
    """Opaque code generator contract."""

    def generate(self, length: int) -> str:
        """Return a random opaque code of exactly `length` characters."""

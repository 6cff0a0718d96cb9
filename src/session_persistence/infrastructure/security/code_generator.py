"""Cryptographically random opaque code generator."""

from __future__ import annotations

import secrets
import string

from session_persistence.application.ports.code_generator_port import CodeGeneratorPort

DEFAULT_CODE_ALPHABET = string.ascii_letters + string.digits


class SecretCodeGenerator(CodeGeneratorPort):
    """Generate opaque codes from the OS CSPRNG via `secrets`."""

    def __init__(self, *, alphabet: str = DEFAULT_CODE_ALPHABET) -> None:
        if len(set(alphabet)) < 2:
            raise ValueError("code alphabet needs at least two distinct characters")
        self._alphabet = alphabet

    def generate(self, length: int) -> str:
        if length <= 0:
            raise ValueError("code length must be positive")
        return "".join(secrets.choice(self._alphabet) for _ in range(length))

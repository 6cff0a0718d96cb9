"""Normalization helpers for login credential inputs."""

from __future__ import annotations


def normalize_login_email(*, email: str) -> str:
    """Normalize one login email and reject blank values."""

    normalized = email.strip().lower()
    if not normalized:
        raise ValueError("email cannot be blank")
    return normalized

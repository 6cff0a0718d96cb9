"""Lifetime and code-shape policy for remember-me persistence records."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

PERSISTENCE_CODE_LENGTH = 64
PERSISTENCE_LIFETIME = timedelta(days=30)
PERSISTENCE_CODE_MAX_ATTEMPTS = 10


def compute_expires_at(*, issued_at: datetime, lifetime: timedelta) -> datetime:
    """Return the instant a record issued at `issued_at` stops being usable."""

    if lifetime <= timedelta(0):
        raise ValueError("persistence lifetime must be positive")
    return issued_at + lifetime


def is_persistence_expired(*, expires_at: datetime, now: datetime) -> bool:
    """Return whether a persistence record with `expires_at` is expired at `now`."""

    return _as_utc(now) >= _as_utc(expires_at)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive timestamps; every stored value is written in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)

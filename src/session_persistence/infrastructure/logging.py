"""Shared logging configuration for the web API and cleanup entrypoints."""

from __future__ import annotations

import logging

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def resolve_log_level(level: str) -> int:
    """Map a level name such as `debug` to its numeric value, defaulting to INFO."""

    normalized_level = level.strip().upper()
    resolved = logging.getLevelName(normalized_level) if normalized_level else logging.INFO
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(*, level: str) -> None:
    """Configure process logging with consistent format and runtime level."""

    resolved_level = resolve_log_level(level)
    logging.basicConfig(
        level=resolved_level,
        format=_LOG_FORMAT,
    )
    # SQL statement logging is only useful when chasing query issues.
    logging.getLogger("sqlalchemy.engine").setLevel(max(resolved_level, logging.WARNING))

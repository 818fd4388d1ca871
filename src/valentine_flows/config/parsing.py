"""Parsing helpers for configuration values read from env vars and TOML."""

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_VALID_ENVIRONMENTS = {"development", "test", "production"}


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"true", "1", "yes", "on"}


def _parse_float(value: Any, *, name: str) -> Optional[float]:
    """Parse a positive float, warning and returning None when invalid."""
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid value for %s: %r (expected a number)", name, value)
        return None
    if parsed <= 0:
        logger.warning("Invalid value for %s: %r (must be positive)", name, value)
        return None
    return parsed


def _normalize_log_level(value: str) -> str:
    normalized = str(value).strip().upper()
    if normalized not in _VALID_LOG_LEVELS:
        logger.warning(
            "Invalid log level '%s'. Falling back to 'INFO'. Valid options: %s",
            value,
            ", ".join(sorted(_VALID_LOG_LEVELS)),
        )
        return "INFO"
    return normalized


def _normalize_environment(value: str) -> str:
    normalized = str(value).strip().lower()
    if normalized not in _VALID_ENVIRONMENTS:
        logger.warning(
            "Invalid environment '%s'. Falling back to 'development'. Valid options: %s",
            value,
            ", ".join(sorted(_VALID_ENVIRONMENTS)),
        )
        return "development"
    return normalized

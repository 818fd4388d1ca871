"""Audit logging and secret redaction.

Structured audit events are written to a dedicated logger
(``valentine_flows.core.observability.audit``) with the event payload in
``extra["audit"]`` so handlers can filter and serialize them.

SECURITY: error text that might echo request headers or provider payloads
must go through ``redact_secrets`` before it is logged or returned to a
caller.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict

logger = logging.getLogger(__name__)


class AuditEventType(Enum):
    """Types of audit events emitted by the orchestration core."""

    RETRY_ATTEMPT = "retry_attempt"
    CIRCUIT_OPENED = "circuit_opened"
    CIRCUIT_REJECTED = "circuit_rejected"
    CIRCUIT_RECOVERED = "circuit_recovered"
    PROVIDER_FAILURE = "provider_failure"
    FLOW_COMPLETED = "flow_completed"
    FLOW_FAILED = "flow_failed"
    FLOW_TIMEOUT = "flow_timeout"
    PROVIDER_ERROR_SPIKE = "provider_error_spike"
    OTHER = "other"


@dataclass
class AuditEvent:
    """Structured audit event."""

    event_type: AuditEventType
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "event_type": self.event_type.value,
            "timestamp": self.timestamp,
            "details": self.details,
        }


class AuditLogger:
    """Writes audit events to a separate logger for easy filtering."""

    def __init__(self) -> None:
        self._logger = logging.getLogger(f"{__name__}.audit")

    def log(self, event: AuditEvent) -> None:
        """Log an audit event."""
        self._logger.info(f"AUDIT: {event.event_type.value}", extra={"audit": event.to_dict()})


_audit = AuditLogger()


def get_audit_logger() -> AuditLogger:
    """Get the global audit logger."""
    return _audit


def audit_log(event_type: str, **details: Any) -> None:
    """Convenience function for audit logging.

    Args:
        event_type: One of the ``AuditEventType`` values; unknown types are
            recorded as ``other`` with the original name preserved.
        **details: Additional details to include in the audit log
    """
    try:
        event_enum = AuditEventType(event_type)
    except ValueError:
        event_enum = AuditEventType.OTHER
        details["original_event_type"] = event_type

    _audit.log(AuditEvent(event_type=event_enum, details=details))


# ---------------------------------------------------------------------------
# Secret redaction
# ---------------------------------------------------------------------------

# Matches "api_key=...", "Bearer ...", "token: ..." and similar
_SECRET_PATTERN = re.compile(
    r"(?i)"
    r"(?:"
    r"(?:api[_-]?key|token|bearer|authorization|secret|password|credential|xi-api-key)"
    r"[\s:=]+"
    r")"
    r"['\"]?([^\s'\",}]{8,})['\"]?",
)

_SENSITIVE_HEADERS = frozenset(
    {
        "authorization",
        "x-api-key",
        "xi-api-key",
        "api-key",
        "apikey",
        "cookie",
        "set-cookie",
        "proxy-authorization",
    }
)

REDACTED = "****"


def redact_secrets(text: str) -> str:
    """Remove API keys and bearer tokens from *text*.

    Args:
        text: Input text that may contain secrets.

    Returns:
        Text with the secret portion of each match replaced by ``"****"``.
    """
    if not text:
        return text

    def _replace(match: re.Match[str]) -> str:
        full = match.group(0)
        return full.replace(match.group(1), REDACTED)

    return _SECRET_PATTERN.sub(_replace, text)


def redact_headers(headers: Dict[str, str]) -> Dict[str, str]:
    """Return a copy of *headers* with sensitive values redacted."""
    return {
        key: (REDACTED if key.lower() in _SENSITIVE_HEADERS else value)
        for key, value in headers.items()
    }

"""Flow error taxonomy.

Every failure that leaves the orchestration core is a single concrete
``FlowError`` carrying a machine-readable code, an HTTP-style status, a
retryability flag, the provider that failed and optional diagnostics.
Route handlers switch on ``code`` and surface ``retryable`` to decide
whether to offer a retry action.

Each code has exactly one canonical ``(status, retryable)`` pairing, see
``CANONICAL_STATUS``. Build errors with ``FlowError.from_code`` to get the
pairing right; the explicit constructor exists for boundary code that
replays an error body it received.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class FlowErrorCode(str, Enum):
    """Closed set of machine-readable error codes."""

    AUTH_REQUIRED = "AUTH_REQUIRED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    PARTNER_PROFILE_REQUIRED = "PARTNER_PROFILE_REQUIRED"
    PROVIDER_CONFIG_MISSING = "PROVIDER_CONFIG_MISSING"
    PROVIDER_TIMEOUT = "PROVIDER_TIMEOUT"
    PROVIDER_ENRICHMENT_FAILED = "PROVIDER_ENRICHMENT_FAILED"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    RATE_LIMIT_UNAVAILABLE = "RATE_LIMIT_UNAVAILABLE"


# Mapping: FlowErrorCode -> (status, retryable)
CANONICAL_STATUS: dict[FlowErrorCode, tuple[int, bool]] = {
    FlowErrorCode.AUTH_REQUIRED: (401, False),
    FlowErrorCode.VALIDATION_ERROR: (400, False),
    FlowErrorCode.PARTNER_PROFILE_REQUIRED: (422, False),
    FlowErrorCode.PROVIDER_CONFIG_MISSING: (503, False),
    FlowErrorCode.PROVIDER_TIMEOUT: (504, True),
    FlowErrorCode.PROVIDER_ENRICHMENT_FAILED: (502, True),
    FlowErrorCode.RATE_LIMIT_EXCEEDED: (429, True),
    FlowErrorCode.RATE_LIMIT_UNAVAILABLE: (503, True),
}

PROVIDER_ERROR_CODES = frozenset(
    {
        FlowErrorCode.PROVIDER_CONFIG_MISSING,
        FlowErrorCode.PROVIDER_TIMEOUT,
        FlowErrorCode.PROVIDER_ENRICHMENT_FAILED,
    }
)

_FROZEN_FIELDS = frozenset({"message", "code", "status", "retryable", "provider", "details"})


class FlowError(Exception):
    """Typed error shared by adapters, orchestrators and route handlers.

    Attributes:
        message: Human-readable description
        code: One of ``FlowErrorCode``
        status: HTTP status the boundary should answer with
        retryable: Whether retrying the same request can succeed
        provider: Capability that failed ("perplexity", "fastrouter", ...),
            or "orchestrator" / "system"
        details: Optional free-form diagnostic payload

    The fields are read-only once the error is built.
    """

    def __init__(
        self,
        message: str,
        *,
        code: FlowErrorCode,
        status: int,
        retryable: bool,
        provider: str = "system",
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = FlowErrorCode(code)
        self.status = status
        self.retryable = retryable
        self.provider = provider
        self.details = details
        self._frozen = True

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _FROZEN_FIELDS and getattr(self, "_frozen", False):
            raise AttributeError(f"FlowError.{name} is read-only")
        super().__setattr__(name, value)

    def __reduce__(self):
        return (
            _restore_flow_error,
            (self.message, self.code, self.status, self.retryable, self.provider, self.details),
        )

    def __repr__(self) -> str:
        return (
            f"FlowError({self.message!r}, code={self.code.value}, status={self.status}, "
            f"retryable={self.retryable}, provider={self.provider!r})"
        )

    @classmethod
    def from_code(
        cls,
        code: FlowErrorCode,
        message: str,
        *,
        provider: str = "system",
        details: Any = None,
    ) -> "FlowError":
        """Build an error using the canonical status/retryable pairing for *code*."""
        status, retryable = CANONICAL_STATUS[FlowErrorCode(code)]
        return cls(
            message,
            code=code,
            status=status,
            retryable=retryable,
            provider=provider,
            details=details,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error body route handlers send to clients."""
        return {
            "error": self.message,
            "code": self.code.value,
            "retryable": self.retryable,
            "provider": self.provider,
            "details": self.details,
        }


def _restore_flow_error(
    message: str,
    code: FlowErrorCode,
    status: int,
    retryable: bool,
    provider: str,
    details: Any,
) -> FlowError:
    return FlowError(
        message,
        code=code,
        status=status,
        retryable=retryable,
        provider=provider,
        details=details,
    )


def is_flow_error(error: object) -> bool:
    """Return True if *error* is a ``FlowError``."""
    return isinstance(error, FlowError)


def config_missing(provider: str, message: str) -> FlowError:
    return FlowError.from_code(FlowErrorCode.PROVIDER_CONFIG_MISSING, message, provider=provider)


def provider_timeout(provider: str, message: str, details: Optional[Any] = None) -> FlowError:
    return FlowError.from_code(
        FlowErrorCode.PROVIDER_TIMEOUT, message, provider=provider, details=details
    )


def enrichment_failed(provider: str, message: str, details: Optional[Any] = None) -> FlowError:
    return FlowError.from_code(
        FlowErrorCode.PROVIDER_ENRICHMENT_FAILED, message, provider=provider, details=details
    )


def validation_error(message: str, details: Optional[Any] = None) -> FlowError:
    return FlowError.from_code(FlowErrorCode.VALIDATION_ERROR, message, details=details)

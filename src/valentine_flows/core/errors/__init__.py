"""Error types for valentine-flows.

``FlowError`` is the only error type that crosses the orchestration
boundary. Transport errors (``RequestTimeoutError``, ``CircuitOpenError``,
``UpstreamStatusError``) are internal to adapters.

Usage:
    from valentine_flows.core.errors import FlowError, FlowErrorCode

    raise FlowError.from_code(
        FlowErrorCode.PROVIDER_TIMEOUT,
        "Flow exceeded timeout budget",
        provider="orchestrator",
    )
"""

from valentine_flows.core.errors.flow import (
    CANONICAL_STATUS,
    PROVIDER_ERROR_CODES,
    FlowError,
    FlowErrorCode,
    config_missing,
    enrichment_failed,
    is_flow_error,
    provider_timeout,
    validation_error,
)
from valentine_flows.core.errors.transport import (
    CircuitOpenError,
    RequestTimeoutError,
    UpstreamStatusError,
)
from valentine_flows.core.errors.base import error_to_response

__all__ = [
    # Taxonomy
    "CANONICAL_STATUS",
    "PROVIDER_ERROR_CODES",
    "FlowError",
    "FlowErrorCode",
    "config_missing",
    "enrichment_failed",
    "is_flow_error",
    "provider_timeout",
    "validation_error",
    # Transport
    "CircuitOpenError",
    "RequestTimeoutError",
    "UpstreamStatusError",
    # Mapping
    "error_to_response",
]

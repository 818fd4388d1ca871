"""Error-to-response mapping for route-handling collaborators.

Usage:
    from valentine_flows.core.errors import FlowError, error_to_response

    try:
        result = await orchestrator.generate_date_plan(request)
    except FlowError as e:
        status, body = error_to_response(e, route="/api/plan/date")
        return json_response(body, status=status)
"""

from __future__ import annotations

from typing import Any, Optional

from valentine_flows.core.errors.flow import PROVIDER_ERROR_CODES, FlowError
from valentine_flows.core.observability import audit_log, redact_secrets


def error_to_response(
    error: FlowError,
    *,
    route: Optional[str] = None,
) -> tuple[int, dict[str, Any]]:
    """Convert a ``FlowError`` to ``(status, json_body)``.

    Provider failures that surface as 5xx also emit a
    ``provider_error_spike`` audit event so error-rate alerts can key on
    provider and route.

    Args:
        error: The error raised by an orchestrator or adapter.
        route: Optional route label for the audit event.

    Returns:
        Tuple of HTTP status and body ``{error, code, retryable, provider, details}``.
    """
    body = error.to_dict()
    if isinstance(body["details"], str):
        body["details"] = redact_secrets(body["details"])

    if error.code in PROVIDER_ERROR_CODES and error.status >= 500:
        audit_log(
            "provider_error_spike",
            code=error.code.value,
            provider=error.provider,
            route=route or "unknown",
            retryable=error.retryable,
            status=error.status,
        )

    return error.status, body

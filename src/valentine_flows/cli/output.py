"""JSON envelope output for CLI commands."""

import json
import sys
from typing import Any, NoReturn, Optional

import click

from valentine_flows.core.errors import FlowError, error_to_response


def _emit(envelope: dict[str, Any]) -> None:
    click.echo(json.dumps(envelope, indent=2, default=str))


def emit_success(data: Any) -> None:
    """Print a success envelope."""
    _emit({"success": True, "data": data, "error": None})


def emit_error(
    message: str,
    *,
    code: str,
    remediation: Optional[str] = None,
    details: Any = None,
    **extra: Any,
) -> NoReturn:
    """Print an error envelope and exit with status 1."""
    data: dict[str, Any] = {"error_code": code, **extra}
    if remediation:
        data["remediation"] = remediation
    if details is not None:
        data["details"] = details
    _emit({"success": False, "data": data, "error": message})
    sys.exit(1)


def emit_flow_error(error: FlowError, *, route: Optional[str] = None) -> NoReturn:
    """Print the envelope for a ``FlowError`` and exit with status 1."""
    status, body = error_to_response(error, route=route)
    emit_error(
        body["error"],
        code=body["code"],
        details=body["details"],
        status=status,
        retryable=body["retryable"],
        provider=body["provider"],
    )

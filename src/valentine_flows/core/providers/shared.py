"""Shared helpers for HTTP-backed provider adapters.

Pure parsing helpers:
    - is_valid_url(value) -> bool
    - safe_json_parse(value, fallback) -> Any
    - read_json(response, fallback) -> Any
    - first_message_content(data) -> Optional[str]
    - extract_error_message(response) -> str

Webhook helpers:
    - verify_webhook_signature(body, signature, secret) -> bool

SECURITY: error text extracted from provider responses is always passed
through ``redact_secrets``.
"""

from __future__ import annotations

import hashlib
import hmac
import json
from typing import TYPE_CHECKING, Any, Optional, Union
from urllib.parse import urlparse

from valentine_flows.core.observability import redact_secrets

if TYPE_CHECKING:
    import httpx


def is_valid_url(value: Any) -> bool:
    """Return True for absolute http(s) URLs with a host."""
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def safe_json_parse(value: Optional[str], fallback: Any = None) -> Any:
    """Parse *value* as JSON, returning *fallback* on any parse failure."""
    if value is None:
        return fallback
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        return fallback


def read_json(response: "httpx.Response", fallback: Any = None) -> Any:
    """Return the decoded JSON body of *response*, or *fallback* if it is not JSON."""
    try:
        return response.json()
    except ValueError:
        return fallback


def first_message_content(data: Any) -> Optional[str]:
    """Return ``choices[0].message.content`` of a chat-completions body."""
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    return content if isinstance(content, str) else None


def extract_error_message(response: "httpx.Response") -> str:
    """Extract and redact an error message from an HTTP error response.

    Tries the ``{"error": {"message": ...}}``, ``{"error": "..."}`` and
    ``{"message": ...}`` shapes before falling back to the raw body.

    Args:
        response: An httpx Response object.

    Returns:
        A human-readable, secret-redacted error message.
    """
    try:
        data = response.json()
        error_field = data.get("error")
        if isinstance(error_field, dict):
            msg = error_field.get("message", str(error_field))
        elif isinstance(error_field, str):
            msg = error_field
        else:
            msg = data.get("message", response.text[:200])
        return redact_secrets(str(msg))
    except Exception:
        text = response.text[:200] if response.text else ""
        return redact_secrets(text)


def verify_webhook_signature(
    body: Union[str, bytes],
    signature: Optional[str],
    secret: Optional[str],
) -> bool:
    """Verify a hex HMAC-SHA256 signature of *body*.

    No secret configured means verification is disabled and every request
    is accepted. With a secret, a missing signature is rejected.
    """
    if not secret:
        return True
    if not signature:
        return False
    payload = body.encode("utf-8") if isinstance(body, str) else body
    expected = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected.encode("ascii"), signature.strip().encode("utf-8"))

"""Transport-level error classes.

These never leave an adapter: the adapter state machine translates them
into ``FlowError`` values before returning control to the orchestrator.
"""

from __future__ import annotations

from typing import Optional


class RequestTimeoutError(Exception):
    """A single timed HTTP call exceeded its deadline.

    Attributes:
        timeout_seconds: The deadline that was exceeded.
        url: Target URL of the request.
    """

    def __init__(
        self,
        message: str,
        timeout_seconds: Optional[float] = None,
        url: Optional[str] = None,
    ):
        super().__init__(message)
        self.timeout_seconds = timeout_seconds
        self.url = url


class CircuitOpenError(Exception):
    """Circuit breaker is open and rejecting calls without invoking them.

    Attributes:
        breaker_key: Key of the open breaker (e.g. "perplexity-search").
        retry_after: Seconds until the open window elapses.
    """

    def __init__(
        self,
        message: str,
        breaker_key: Optional[str] = None,
        retry_after: Optional[float] = None,
    ):
        super().__init__(message)
        self.breaker_key = breaker_key
        self.retry_after = retry_after


class UpstreamStatusError(Exception):
    """Provider answered with a non-2xx status code.

    Raised inside the retried call so that the retry loop and the breaker
    both see HTTP failures as failures.
    """

    def __init__(self, provider: str, status_code: int, message: str = ""):
        self.provider = provider
        self.status_code = status_code
        text = f"{provider} request failed with status {status_code}"
        if message:
            text += f": {message}"
        super().__init__(text)

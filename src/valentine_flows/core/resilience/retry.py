"""Async retry with exponential backoff and jitter.

Retries unconditionally up to the policy's budget: the error type is not
inspected, so a request rejected for bad input is retried just like a
network blip. Callers that need "retry only transient errors" must filter
before calling.
"""

import asyncio
import random
from typing import Awaitable, Callable, Optional, TypeVar

from valentine_flows.core.observability import audit_log, redact_secrets
from valentine_flows.core.resilience.models import RetryPolicy, SleepFunc

T = TypeVar("T")

DEFAULT_RETRY_POLICY = RetryPolicy()


def compute_delay(policy: RetryPolicy, attempt: int, rng: random.Random) -> float:
    """Return the backoff delay in seconds before retrying after *attempt*."""
    jitter = rng.random() * policy.max_jitter
    return min(policy.max_delay, policy.base_delay * (2**attempt) + jitter)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: Optional[RetryPolicy] = None,
    *,
    rng: Optional[random.Random] = None,
    sleep_func: Optional[SleepFunc] = None,
    label: Optional[str] = None,
) -> T:
    """Invoke *operation*, retrying on any exception.

    Args:
        operation: Zero-argument async callable (use a lambda for arguments).
        policy: Retry policy (default: 2 retries, 0.35s base, 2.0s cap).
        rng: Injectable Random instance for deterministic jitter.
        sleep_func: Injectable sleep function for time control in tests.
        label: Optional name used in retry audit events.

    Returns:
        Result of the first successful attempt.

    Raises:
        Exception: The exception from the final attempt, unchanged.

    Example:
        >>> result = await with_retry(
        ...     lambda: client.post(url, json=payload),
        ...     RetryPolicy(retries=2),
        ... )
    """
    _policy = policy or DEFAULT_RETRY_POLICY
    _rng = rng or random.Random()
    _sleep = sleep_func or asyncio.sleep

    for attempt in range(_policy.retries + 1):
        try:
            return await operation()
        except Exception as e:
            if attempt >= _policy.retries:
                raise

            delay = compute_delay(_policy, attempt, _rng)
            audit_log(
                "retry_attempt",
                operation=label or "anonymous",
                attempt=attempt + 1,
                max_attempts=_policy.retries + 1,
                delay_ms=int(delay * 1000),
                error_message=redact_secrets(str(e))[:200],
            )
            await _sleep(delay)

    raise RuntimeError("with_retry: unexpected state")

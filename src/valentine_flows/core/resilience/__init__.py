"""Resilience primitives shared by every provider adapter.

- RetryPolicy / with_retry: bounded retry with exponential backoff + jitter
- ResilienceRegistry: per-key circuit breakers with explicit ownership

Adapters compose them as
``registry.with_circuit_breaker(key, lambda: with_retry(call, policy))``:
an open breaker short-circuits before the retry loop runs, and a closed
breaker counts one failure only after the whole retry budget is spent.
"""

from valentine_flows.core.resilience.models import (
    BreakerState,
    BreakerStatus,
    CircuitOptions,
    ClockFunc,
    RetryPolicy,
    SleepFunc,
)
from valentine_flows.core.resilience.registry import (
    DEFAULT_CIRCUIT_OPTIONS,
    ResilienceRegistry,
)
from valentine_flows.core.resilience.retry import (
    DEFAULT_RETRY_POLICY,
    compute_delay,
    with_retry,
)

__all__ = [
    # Models
    "BreakerState",
    "BreakerStatus",
    "CircuitOptions",
    "ClockFunc",
    "RetryPolicy",
    "SleepFunc",
    # Registry
    "DEFAULT_CIRCUIT_OPTIONS",
    "ResilienceRegistry",
    # Retry
    "DEFAULT_RETRY_POLICY",
    "compute_delay",
    "with_retry",
]

"""Resilience data models and protocols.

Defines the core types used across the resilience sub-package:
- RetryPolicy for retry-with-backoff tuning
- CircuitOptions for breaker thresholds
- BreakerState for per-key breaker bookkeeping
- BreakerStatus for observability
- SleepFunc / ClockFunc protocols for injectable time in tests
"""

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration.

    Delay before retry ``n`` (0-based) is
    ``min(max_delay, base_delay * 2**n + jitter)`` with
    ``jitter`` drawn uniformly from ``[0, max_jitter)``.
    """

    retries: int = 2
    base_delay: float = 0.35
    max_delay: float = 2.0
    max_jitter: float = 0.12

    def __post_init__(self) -> None:
        if self.retries < 0:
            raise ValueError(f"retries must be >= 0, got {self.retries}")


@dataclass(frozen=True)
class CircuitOptions:
    """Circuit breaker configuration."""

    failure_threshold: int = 3
    open_for: float = 20.0


@dataclass
class BreakerState:
    """Mutable per-key breaker state, owned by a ``ResilienceRegistry``."""

    consecutive_failures: int = 0
    opened_at: Optional[float] = None


@dataclass(frozen=True)
class BreakerStatus:
    """Snapshot of a breaker for health reporting."""

    key: str
    is_open: bool
    consecutive_failures: int
    retry_after: float


class SleepFunc(Protocol):
    """Protocol for injectable sleep function."""

    async def __call__(self, seconds: float) -> None: ...


class ClockFunc(Protocol):
    """Protocol for injectable monotonic clock."""

    def __call__(self) -> float: ...

"""ResilienceRegistry: explicit owner of circuit breaker state.

The registry is constructed once by whoever wires the adapters (usually
``build_strict_orchestrator``) and passed by reference to every adapter
that shares breaker state. Tests build a fresh registry per case, so there
is no module-level singleton to reset.

State is guarded implicitly by the event loop: every mutation happens
between awaits, so no locks are needed.
"""

import logging
import time
from typing import Awaitable, Callable, Optional, TypeVar

from valentine_flows.core.errors.transport import CircuitOpenError
from valentine_flows.core.observability import audit_log
from valentine_flows.core.resilience.models import (
    BreakerState,
    BreakerStatus,
    CircuitOptions,
    ClockFunc,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CIRCUIT_OPTIONS = CircuitOptions()


class ResilienceRegistry:
    """Per-key circuit breakers with lazy state creation.

    Keys identify a provider operation, e.g. ``"fastrouter-generate"``.
    Each key has independent state that lives as long as the registry.

    Example:
        registry = ResilienceRegistry()
        result = await registry.with_circuit_breaker(
            "perplexity-search",
            lambda: with_retry(call, policy),
        )
    """

    def __init__(
        self,
        default_options: Optional[CircuitOptions] = None,
        *,
        clock: Optional[ClockFunc] = None,
    ) -> None:
        self._states: dict[str, BreakerState] = {}
        self._default_options = default_options or DEFAULT_CIRCUIT_OPTIONS
        self._clock = clock or time.monotonic

    @property
    def default_options(self) -> CircuitOptions:
        return self._default_options

    def _get_or_create_state(self, key: str) -> BreakerState:
        if key not in self._states:
            self._states[key] = BreakerState()
        return self._states[key]

    async def with_circuit_breaker(
        self,
        key: str,
        operation: Callable[[], Awaitable[T]],
        options: Optional[CircuitOptions] = None,
    ) -> T:
        """Run *operation* behind the breaker for *key*.

        Open breaker inside its window: raise ``CircuitOpenError`` without
        calling *operation*. Open breaker past its window: reset to closed
        and proceed. A success resets the failure count; a failure
        increments it and opens the breaker at ``failure_threshold``.

        Args:
            key: Breaker key (provider + operation).
            operation: Zero-argument async callable.
            options: Threshold/window override for this call.

        Returns:
            Result of *operation*.

        Raises:
            CircuitOpenError: If the breaker is open.
            Exception: Whatever *operation* raised, unchanged.
        """
        opts = options or self._default_options
        state = self._get_or_create_state(key)

        if state.opened_at is not None:
            elapsed = self._clock() - state.opened_at
            if elapsed < opts.open_for:
                retry_after = opts.open_for - elapsed
                audit_log(
                    "circuit_rejected",
                    breaker=key,
                    retry_after_ms=int(retry_after * 1000),
                )
                raise CircuitOpenError(
                    f"{key} circuit is open",
                    breaker_key=key,
                    retry_after=retry_after,
                )
            logger.info("Circuit %s open window elapsed, closing", key)
            self._states[key] = BreakerState()

        try:
            result = await operation()
        except Exception:
            live = self._get_or_create_state(key)
            live.consecutive_failures += 1
            if live.consecutive_failures >= opts.failure_threshold:
                live.opened_at = self._clock()
                audit_log(
                    "circuit_opened",
                    breaker=key,
                    consecutive_failures=live.consecutive_failures,
                    open_for_ms=int(opts.open_for * 1000),
                )
            raise

        previous = self._states.get(key)
        if previous is not None and previous.consecutive_failures:
            audit_log(
                "circuit_recovered",
                breaker=key,
                previous_failures=previous.consecutive_failures,
            )
        self._states[key] = BreakerState()
        return result

    def get_state(self, key: str) -> BreakerState:
        """Return a copy of the breaker state for *key* (closed if unknown)."""
        state = self._states.get(key)
        if state is None:
            return BreakerState()
        return BreakerState(
            consecutive_failures=state.consecutive_failures,
            opened_at=state.opened_at,
        )

    def get_status(self, key: str, options: Optional[CircuitOptions] = None) -> BreakerStatus:
        """Return an observability snapshot for *key*."""
        opts = options or self._default_options
        state = self.get_state(key)
        retry_after = 0.0
        is_open = False
        if state.opened_at is not None:
            remaining = opts.open_for - (self._clock() - state.opened_at)
            if remaining > 0:
                is_open = True
                retry_after = remaining
        return BreakerStatus(
            key=key,
            is_open=is_open,
            consecutive_failures=state.consecutive_failures,
            retry_after=retry_after,
        )

    def keys(self) -> list[str]:
        """Return every breaker key seen so far, sorted."""
        return sorted(self._states)

    def reset(self, key: Optional[str] = None) -> None:
        """Reset one breaker, or all breakers when *key* is None."""
        if key is None:
            self._states.clear()
        else:
            self._states.pop(key, None)

"""Base class for provider adapters.

Every adapter runs the same state machine:

1. Config check: missing credentials raise ``PROVIDER_CONFIG_MISSING``
   before any network call.
2. One timed HTTP call through ``fetch_with_timeout``, wrapped in
   ``with_retry`` and the adapter's circuit breaker.
3. Transport mapping: ``RequestTimeoutError`` becomes ``PROVIDER_TIMEOUT``,
   any other non-``FlowError`` exception becomes
   ``PROVIDER_ENRICHMENT_FAILED``; ``FlowError`` passes through.
4. Response validation; failures raise ``PROVIDER_ENRICHMENT_FAILED``.

An adapter in ``FailureMode.BEST_EFFORT`` runs the same path but logs the
``FlowError`` and returns the operation's fallback value instead.

Example usage:
    class ExampleAdapter(ProviderAdapter):
        provider = "example"
        breaker_key = "example-fetch"
        failure_message = "Example fetch failed"

        async def fetch(self, item_id, options=None):
            async def call():
                self._require_config(self._config.is_configured, "Example API key is not configured")
                response = await self._request("GET", url, options)
                return response.json()

            return await self._run(call, fallback=None)
"""

import copy
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Awaitable, Callable, ClassVar, Optional, TypeVar

import httpx

from valentine_flows.core.errors import (
    FlowError,
    RequestTimeoutError,
    UpstreamStatusError,
    config_missing,
    enrichment_failed,
    provider_timeout,
)
from valentine_flows.core.network import fetch_with_timeout
from valentine_flows.core.observability import audit_log, redact_headers, redact_secrets
from valentine_flows.core.providers.shared import extract_error_message
from valentine_flows.core.resilience import (
    DEFAULT_RETRY_POLICY,
    CircuitOptions,
    ResilienceRegistry,
    RetryPolicy,
    with_retry,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FailureMode(str, Enum):
    """How an adapter reports failure.

    STRICT: raise ``FlowError``.
    BEST_EFFORT: log the error and return a documented fallback value.
    """

    STRICT = "strict"
    BEST_EFFORT = "best_effort"


@dataclass(frozen=True)
class AdapterOptions:
    """Per-call overrides. ``None`` means the adapter's default."""

    timeout: Optional[float] = None
    retries: Optional[int] = None


class ProviderAdapter:
    """Shared plumbing for strict/best-effort provider adapters.

    Subclasses set ``provider``, ``breaker_key``, ``failure_message`` and
    optionally ``default_timeout`` / ``default_retries``.

    Attributes:
        provider: Capability tag reported on ``FlowError.provider``
        breaker_key: Circuit breaker key in the shared registry
        failure_message: Message for unexpected transport failures
    """

    provider: ClassVar[str] = "system"
    breaker_key: ClassVar[str] = ""
    failure_message: ClassVar[str] = "Provider call failed"
    default_timeout: ClassVar[float] = 6.0
    default_retries: ClassVar[int] = 0

    def __init__(
        self,
        config: Any,
        registry: Optional[ResilienceRegistry] = None,
        *,
        mode: FailureMode = FailureMode.STRICT,
        retry_policy: Optional[RetryPolicy] = None,
        circuit_options: Optional[CircuitOptions] = None,
    ):
        """Initialize the adapter.

        Args:
            config: Provider config (see ``valentine_flows.config.providers``)
            registry: Breaker registry shared with sibling adapters. A private
                registry is created when omitted.
            mode: Failure mode (default: STRICT)
            retry_policy: Backoff tuning; the retry count is taken from the
                per-call options, not from this policy.
            circuit_options: Breaker threshold/window override.
        """
        self._config = config
        self._registry = registry if registry is not None else ResilienceRegistry()
        self._mode = FailureMode(mode)
        self._retry_policy = retry_policy or DEFAULT_RETRY_POLICY
        self._circuit_options = circuit_options

    @property
    def config(self) -> Any:
        return self._config

    @property
    def registry(self) -> ResilienceRegistry:
        return self._registry

    @property
    def mode(self) -> FailureMode:
        return self._mode

    @property
    def is_strict(self) -> bool:
        return self._mode is FailureMode.STRICT

    def best_effort(self):
        """Return a copy of this adapter in BEST_EFFORT mode.

        The copy shares config and breaker registry with the original.
        """
        clone = copy.copy(self)
        clone._mode = FailureMode.BEST_EFFORT
        return clone

    def strict(self):
        """Return a copy of this adapter in STRICT mode."""
        clone = copy.copy(self)
        clone._mode = FailureMode.STRICT
        return clone

    def __repr__(self) -> str:
        return f"{type(self).__name__}(provider={self.provider!r}, mode={self._mode.value!r})"

    # ------------------------------------------------------------------
    # State machine helpers
    # ------------------------------------------------------------------

    def _require_config(self, configured: bool, message: str) -> None:
        if not configured:
            raise config_missing(self.provider, message)

    def _resolve_options(self, options: Optional[AdapterOptions]) -> tuple[float, RetryPolicy]:
        opts = options or AdapterOptions()
        timeout = opts.timeout if opts.timeout is not None else self.default_timeout
        retries = opts.retries if opts.retries is not None else self.default_retries
        return timeout, replace(self._retry_policy, retries=retries)

    async def _request(
        self,
        method: str,
        url: str,
        options: Optional[AdapterOptions] = None,
        **request_kwargs: Any,
    ) -> httpx.Response:
        """Issue a timed request behind the breaker and retry loop.

        Non-2xx responses raise ``UpstreamStatusError`` inside the retried
        call, so they count as failures for both retry and breaker.
        """
        timeout, policy = self._resolve_options(options)
        logger.debug(
            "%s %s %s (timeout=%.2fs, retries=%d, headers=%s)",
            self.provider,
            method,
            url,
            timeout,
            policy.retries,
            redact_headers(request_kwargs.get("headers") or {}),
        )

        async def attempt() -> httpx.Response:
            response = await fetch_with_timeout(method, url, timeout, **request_kwargs)
            if not 200 <= response.status_code < 300:
                raise UpstreamStatusError(
                    self.provider,
                    response.status_code,
                    extract_error_message(response),
                )
            return response

        return await self._registry.with_circuit_breaker(
            self.breaker_key,
            lambda: with_retry(attempt, policy, label=self.breaker_key),
            self._circuit_options,
        )

    def _invalid(self, message: str, details: Optional[Any] = None) -> FlowError:
        return enrichment_failed(self.provider, message, details)

    def _translate(self, error: Exception) -> FlowError:
        if isinstance(error, FlowError):
            return error
        if isinstance(error, RequestTimeoutError):
            return provider_timeout(self.provider, str(error))
        if isinstance(error, UpstreamStatusError):
            return enrichment_failed(
                self.provider,
                f"{self.failure_message}: upstream returned {error.status_code}",
                redact_secrets(str(error)),
            )
        return enrichment_failed(self.provider, self.failure_message, redact_secrets(str(error)))

    async def _run(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        fallback: Any = None,
    ) -> T:
        """Run *operation* under this adapter's failure mode.

        Strict: every failure leaves as a ``FlowError``. Best effort: the
        ``FlowError`` is logged and *fallback* is returned.
        """
        try:
            try:
                return await operation()
            except FlowError:
                raise
            except Exception as e:
                raise self._translate(e) from e
        except FlowError as error:
            if self.is_strict:
                raise
            logger.warning(
                "%s call failed in best-effort mode, returning fallback: [%s] %s",
                self.provider,
                error.code.value,
                error.message,
            )
            audit_log(
                "provider_failure",
                provider=self.provider,
                code=error.code.value,
                mode=self._mode.value,
            )
            return fallback

"""OpenAI content moderation.

Screens user-supplied text before it reaches generation, speech or card
rendering. Without an OpenAI key the adapter answers from a small local
blocklist instead of failing.

Example usage:
    adapter = ContentModerationAdapter(OpenAIConfig(api_key="sk-..."), registry)
    verdict = await adapter.moderate("Dinner by the river")
    if not verdict.allowed:
        raise validation_error("Input blocked by moderation", verdict.reason)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from valentine_flows.config.providers import OpenAIConfig
from valentine_flows.core.providers.base import AdapterOptions, ProviderAdapter
from valentine_flows.core.providers.shared import read_json

logger = logging.getLogger(__name__)

OPENAI_MODERATION_ENDPOINT = "/moderations"
FLAGGED_REASON = "OpenAI moderation flagged content."
EMPTY_REASON = "Empty content"

BLOCKED_PHRASES = ("self-harm", "kill", "violent attack", "hate speech")


@dataclass(frozen=True)
class ModerationResult:
    """Moderation verdict.

    Attributes:
        allowed: Whether the text may be used
        reason: Why the text was blocked (None when allowed)
        source: "openai", "blocklist" or "local" (empty input)
        categories: Flagged category names reported by OpenAI
    """

    allowed: bool
    reason: Optional[str] = None
    source: str = "openai"
    categories: tuple[str, ...] = field(default_factory=tuple)


# Best-effort fallback: a failed moderation call allows the text.
ALLOWED_FALLBACK = ModerationResult(allowed=True, source="fallback")


def check_blocklist(text: str) -> ModerationResult:
    """Match *text* against ``BLOCKED_PHRASES`` (case-insensitive)."""
    lowered = text.lower()
    for phrase in BLOCKED_PHRASES:
        if phrase in lowered:
            return ModerationResult(
                allowed=False,
                reason=f"Blocked phrase matched: {phrase}",
                source="blocklist",
            )
    return ModerationResult(allowed=True, source="blocklist")


class ContentModerationAdapter(ProviderAdapter):
    """Content moderation capability backed by OpenAI.

    Unlike the other adapters, a missing key is not a failure: the local
    blocklist answers instead. Best-effort fallback: allowed.
    """

    provider = "openai"
    breaker_key = "openai-moderation"
    failure_message = "OpenAI moderation failed"
    default_timeout = 6.0

    def __init__(self, config: Optional[OpenAIConfig] = None, registry=None, **kwargs: Any):
        super().__init__(config or OpenAIConfig(), registry, **kwargs)

    async def moderate(self, text: str, options: Optional[AdapterOptions] = None) -> ModerationResult:
        """Classify *text*.

        Args:
            text: User-supplied text
            options: Timeout/retry overrides (default: 6.0s, no retries)

        Returns:
            ModerationResult; blank text is never allowed

        Raises:
            FlowError: In strict mode, if the OpenAI call fails
        """
        if not text or not text.strip():
            return ModerationResult(allowed=False, reason=EMPTY_REASON, source="local")

        if not self._config.is_configured:
            return check_blocklist(text)

        async def call() -> ModerationResult:
            response = await self._request(
                "POST",
                f"{self._config.base_url.rstrip('/')}{OPENAI_MODERATION_ENDPOINT}",
                options,
                headers={
                    "Authorization": f"Bearer {self._config.api_key}",
                    "Content-Type": "application/json",
                },
                json={"model": self._config.moderation_model, "input": text},
            )
            return self._parse_response(read_json(response, None))

        return await self._run(call, fallback=ALLOWED_FALLBACK)

    def _parse_response(self, data: Any) -> ModerationResult:
        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list):
            raise self._invalid("OpenAI moderation returned no results")
        if not results or not isinstance(results[0], dict):
            return ModerationResult(allowed=True)

        first = results[0]
        if not first.get("flagged"):
            return ModerationResult(allowed=True)

        categories = first.get("categories")
        flagged = (
            tuple(sorted(name for name, hit in categories.items() if hit))
            if isinstance(categories, dict)
            else ()
        )
        logger.debug("OpenAI moderation flagged content: %s", ", ".join(flagged) or "unspecified")
        return ModerationResult(allowed=False, reason=FLAGGED_REASON, categories=flagged)

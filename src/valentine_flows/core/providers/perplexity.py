"""Perplexity web search with context.

Asks Perplexity's ``sonar`` chat model for a JSON answer with a summary and
reference links. Links come from the answer's ``links`` field, falling back
to the response's top-level ``citations``; only absolute http(s) URLs are
kept, since they feed link enrichment downstream.

Example usage:
    adapter = WebSearchAdapter(PerplexityConfig(api_key="pplx-..."), registry)
    context = await adapter.search("Top romantic date venues in Paris")
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from valentine_flows.config.providers import PerplexityConfig
from valentine_flows.core.providers.base import AdapterOptions, ProviderAdapter
from valentine_flows.core.providers.shared import (
    first_message_content,
    is_valid_url,
    read_json,
    safe_json_parse,
)

logger = logging.getLogger(__name__)

PERPLEXITY_CHAT_ENDPOINT = "/chat/completions"
SEARCH_SYSTEM_PROMPT = "Return a concise answer in JSON with fields `summary` and `links` (array)."
SEARCH_TEMPERATURE = 0.2


@dataclass(frozen=True)
class WebContext:
    """Search summary plus reference links."""

    summary: str
    links: tuple[str, ...] = field(default_factory=tuple)


EMPTY_WEB_CONTEXT = WebContext(summary="", links=())


class WebSearchAdapter(ProviderAdapter):
    """Web search capability backed by Perplexity.

    Strict mode requires a non-empty summary and at least one valid link.
    Best-effort fallback: ``WebContext("", ())``.
    """

    provider = "perplexity"
    breaker_key = "perplexity-search"
    failure_message = "Perplexity enrichment failed"
    default_timeout = 4.0

    def __init__(self, config: Optional[PerplexityConfig] = None, registry=None, **kwargs: Any):
        super().__init__(config or PerplexityConfig(), registry, **kwargs)

    async def search(self, query: str, options: Optional[AdapterOptions] = None) -> WebContext:
        """Search the web for *query*.

        Args:
            query: Natural-language search query
            options: Timeout/retry overrides (default: 4.0s, no retries)

        Returns:
            WebContext with summary and validated links

        Raises:
            FlowError: In strict mode, on any failure
        """

        async def call() -> WebContext:
            self._require_config(self._config.is_configured, "Perplexity API key is not configured")
            response = await self._request(
                "POST",
                f"{self._config.base_url.rstrip('/')}{PERPLEXITY_CHAT_ENDPOINT}",
                options,
                headers={
                    "Authorization": f"Bearer {self._config.api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "model": self._config.model,
                    "messages": [
                        {"role": "system", "content": SEARCH_SYSTEM_PROMPT},
                        {"role": "user", "content": query},
                    ],
                    "temperature": SEARCH_TEMPERATURE,
                },
            )
            return self._parse_response(read_json(response, {}))

        return await self._run(call, fallback=EMPTY_WEB_CONTEXT)

    def _parse_response(self, data: Any) -> WebContext:
        raw = first_message_content(data) or "{}"
        parsed = safe_json_parse(raw, {})
        if not isinstance(parsed, dict):
            parsed = {}

        candidates = parsed.get("links")
        if candidates is None and isinstance(data, dict):
            candidates = data.get("citations")
        if not isinstance(candidates, list):
            candidates = []
        links = tuple(link for link in candidates if is_valid_url(link))

        summary = parsed.get("summary")
        if not isinstance(summary, str):
            summary = ""

        if not links or not summary.strip():
            raise self._invalid(
                "Perplexity returned insufficient enrichment context",
                {"links": len(links), "has_summary": bool(summary.strip())},
            )

        logger.debug("Perplexity returned %d usable link(s)", len(links))
        return WebContext(summary=summary, links=links)

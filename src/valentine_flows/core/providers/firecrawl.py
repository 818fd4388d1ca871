"""Firecrawl link enrichment.

Scrapes up to ``MAX_LINKS`` reference links concurrently through
Firecrawl's ``/v1/scrape`` endpoint and returns short markdown extracts.

Strict mode is all-or-nothing: one failed link fails the whole call and
cancels the remaining scrapes. Best-effort mode drops failed links and
returns whatever extracts succeeded (possibly an empty list).
"""

import asyncio
import logging
from typing import Any, Optional, Sequence

from valentine_flows.config.providers import FirecrawlConfig
from valentine_flows.core.concurrency import gather_fail_fast
from valentine_flows.core.providers.base import AdapterOptions, ProviderAdapter
from valentine_flows.core.providers.shared import read_json

logger = logging.getLogger(__name__)

FIRECRAWL_SCRAPE_ENDPOINT = "/v1/scrape"
MAX_LINKS = 3
EXTRACT_MAX_CHARS = 220


class LinkEnrichmentAdapter(ProviderAdapter):
    """Link enrichment capability backed by Firecrawl."""

    provider = "firecrawl"
    breaker_key = "firecrawl-scrape"
    failure_message = "Firecrawl enrichment failed"
    default_timeout = 4.0

    def __init__(self, config: Optional[FirecrawlConfig] = None, registry=None, **kwargs: Any):
        super().__init__(config or FirecrawlConfig(), registry, **kwargs)

    async def enrich(
        self,
        links: Sequence[str],
        options: Optional[AdapterOptions] = None,
    ) -> list[str]:
        """Return markdown extracts for the first three *links*.

        Args:
            links: Reference links, usually from web search
            options: Per-scrape timeout/retry overrides (default: 4.0s, no retries)

        Returns:
            Extracts truncated to 220 characters, in link order

        Raises:
            FlowError: In strict mode, if the key is missing, *links* is
                empty, or any scrape fails
        """
        targets = list(links)[:MAX_LINKS]

        if not self.is_strict:
            if not self._config.is_configured or not targets:
                return []
            extracts = await asyncio.gather(
                *(self._run(lambda link=link: self._scrape(link, options), fallback="") for link in targets)
            )
            kept = [extract for extract in extracts if extract]
            logger.debug("Firecrawl kept %d of %d extract(s)", len(kept), len(targets))
            return kept

        async def call() -> list[str]:
            self._require_config(self._config.is_configured, "Firecrawl API key is not configured")
            if not targets:
                raise self._invalid("No links available for Firecrawl enrichment")
            return await gather_fail_fast(*(self._scrape(link, options) for link in targets))

        return await self._run(call)

    async def _scrape(self, link: str, options: Optional[AdapterOptions]) -> str:
        response = await self._request(
            "POST",
            f"{self._config.base_url.rstrip('/')}{FIRECRAWL_SCRAPE_ENDPOINT}",
            options,
            headers={
                "Authorization": f"Bearer {self._config.api_key}",
                "Content-Type": "application/json",
            },
            json={"url": link, "formats": ["markdown"]},
        )
        data = read_json(response, {})
        if not isinstance(data, dict) or data.get("success") is not True:
            raise self._invalid("Firecrawl returned unsuccessful response", {"url": link})

        payload = data.get("data") if isinstance(data.get("data"), dict) else {}
        markdown = payload.get("markdown") or ""
        if not isinstance(markdown, str) or not markdown.strip():
            raise self._invalid("Firecrawl returned empty extract", {"url": link})

        return markdown[:EXTRACT_MAX_CHARS]

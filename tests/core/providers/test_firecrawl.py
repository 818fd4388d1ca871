"""Tests for LinkEnrichmentAdapter (Firecrawl)."""

import asyncio
from unittest.mock import patch

import httpx
import pytest

from valentine_flows.config import FirecrawlConfig
from valentine_flows.core.errors import FlowError, FlowErrorCode
from valentine_flows.core.providers import LinkEnrichmentAdapter
from valentine_flows.core.providers.firecrawl import EXTRACT_MAX_CHARS, MAX_LINKS

from tests.core.providers.conftest import (
    FIRECRAWL,
    make_mock_response,
    mock_http_client,
    sent_headers,
    sent_json,
)

LINKS = [f"https://venue{i}.example/" for i in range(5)]


def _scraped(markdown="# Venue\nCandlelit tables", success=True):
    return make_mock_response(json_data={"success": success, "data": {"markdown": markdown}})


class TestEnrichStrict:
    @pytest.mark.asyncio
    async def test_scrapes_first_three_links(self, registry):
        adapter = LinkEnrichmentAdapter(FIRECRAWL, registry)
        with mock_http_client(_scraped()) as client:
            extracts = await adapter.enrich(LINKS)

        assert len(extracts) == MAX_LINKS
        assert client.request.call_count == MAX_LINKS
        urls = sorted(sent_json(client, i)["url"] for i in range(MAX_LINKS))
        assert urls == sorted(LINKS[:MAX_LINKS])
        assert sent_json(client)["formats"] == ["markdown"]
        assert client.request.call_args.args[1] == "https://api.firecrawl.dev/v1/scrape"
        assert sent_headers(client)["Authorization"] == "Bearer fc-test-key"

    @pytest.mark.asyncio
    async def test_truncates_extracts(self, registry):
        adapter = LinkEnrichmentAdapter(FIRECRAWL, registry)
        with mock_http_client(_scraped("x" * 1000)):
            extracts = await adapter.enrich(LINKS[:1])

        assert extracts == ["x" * EXTRACT_MAX_CHARS]

    @pytest.mark.asyncio
    async def test_empty_links_fail_without_calls(self, registry):
        adapter = LinkEnrichmentAdapter(FIRECRAWL, registry)
        with mock_http_client(_scraped()) as client:
            with pytest.raises(FlowError) as exc_info:
                await adapter.enrich([])

        assert exc_info.value.code is FlowErrorCode.PROVIDER_ENRICHMENT_FAILED
        assert exc_info.value.message == "No links available for Firecrawl enrichment"
        client.request.assert_not_called()

    @pytest.mark.asyncio
    async def test_unsuccessful_response_fails(self, registry):
        adapter = LinkEnrichmentAdapter(FIRECRAWL, registry)
        with mock_http_client(_scraped(success=False)):
            with pytest.raises(FlowError, match="Firecrawl returned unsuccessful response"):
                await adapter.enrich(LINKS[:1])

    @pytest.mark.asyncio
    async def test_empty_markdown_fails(self, registry):
        adapter = LinkEnrichmentAdapter(FIRECRAWL, registry)
        with mock_http_client(_scraped(markdown="   ")):
            with pytest.raises(FlowError, match="Firecrawl returned empty extract"):
                await adapter.enrich(LINKS[:1])

    @pytest.mark.asyncio
    async def test_one_failed_link_fails_the_call(self, registry):
        adapter = LinkEnrichmentAdapter(FIRECRAWL, registry)
        responses = [_scraped(), _scraped(success=False), _scraped()]
        with mock_http_client(*responses):
            with pytest.raises(FlowError) as exc_info:
                await adapter.enrich(LINKS)

        assert exc_info.value.provider == "firecrawl"

    @pytest.mark.asyncio
    async def test_failure_cancels_pending_scrapes(self, registry):
        adapter = LinkEnrichmentAdapter(FIRECRAWL, registry)
        cancelled = []

        async def fake_request(method, url, **kwargs):
            link = kwargs["json"]["url"]
            if link == LINKS[0]:
                return _scraped(success=False)
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.append(link)
                raise
            return _scraped()

        with mock_http_client() as client:
            client.request.side_effect = fake_request
            with pytest.raises(FlowError):
                await adapter.enrich(LINKS)

        assert sorted(cancelled) == sorted(LINKS[1:MAX_LINKS])


class TestEnrichBestEffort:
    @pytest.mark.asyncio
    async def test_drops_failed_links(self, registry):
        adapter = LinkEnrichmentAdapter(FIRECRAWL, registry).best_effort()

        async def fake_request(method, url, **kwargs):
            if kwargs["json"]["url"] == LINKS[1]:
                raise httpx.ConnectError("refused")
            return _scraped(f"extract for {kwargs['json']['url']}")

        with mock_http_client() as client:
            client.request.side_effect = fake_request
            extracts = await adapter.enrich(LINKS)

        assert extracts == [f"extract for {LINKS[0]}", f"extract for {LINKS[2]}"]

    @pytest.mark.asyncio
    async def test_unconfigured_returns_empty(self, registry):
        adapter = LinkEnrichmentAdapter(FirecrawlConfig(), registry).best_effort()
        with mock_http_client(_scraped()) as client:
            assert await adapter.enrich(LINKS) == []
        client.request.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_links_returns_empty(self, registry):
        adapter = LinkEnrichmentAdapter(FIRECRAWL, registry).best_effort()
        assert await adapter.enrich([]) == []

    @pytest.mark.asyncio
    async def test_best_effort_logs_each_failure(self, registry):
        adapter = LinkEnrichmentAdapter(FIRECRAWL, registry).best_effort()
        with patch("valentine_flows.core.providers.base.audit_log") as audit:
            with mock_http_client(_scraped(success=False)):
                extracts = await adapter.enrich(LINKS[:2])

        assert extracts == []
        assert audit.call_count == 2
        assert audit.call_args.args[0] == "provider_failure"

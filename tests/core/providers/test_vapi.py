"""Tests for TelephonyAdapter (Vapi)."""

import hashlib
import hmac

import pytest

from valentine_flows.config import VapiConfig
from valentine_flows.core.ai import HotlineRequest
from valentine_flows.core.errors import FlowError, FlowErrorCode
from valentine_flows.core.providers import TelephonyAdapter, TelephonySession
from valentine_flows.core.providers.vapi import FIRST_MESSAGE, build_call_body

from tests.core.providers.conftest import VAPI, make_mock_response, mock_http_client, sent_headers, sent_json

REQUEST = HotlineRequest(user_id="user-1", scenario="Plan a surprise anniversary call", partner_name="Sam")


def _started(**overrides):
    body = {"id": "call_123", "webCallUrl": "https://vapi.example/call/123", "status": "queued"}
    body.update(overrides)
    return make_mock_response(json_data=body)


class TestBuildCallBody:
    def test_carries_scenario_and_partner(self):
        body = build_call_body(REQUEST)
        assert body["assistantOverrides"]["firstMessage"] == FIRST_MESSAGE
        assert body["assistantOverrides"]["variableValues"] == {
            "scenario": "Plan a surprise anniversary call",
            "partnerName": "Sam",
        }
        assert body["metadata"] == {"userId": "user-1", "scenario": "Plan a surprise anniversary call"}

    def test_default_partner_name(self):
        body = build_call_body(HotlineRequest(user_id="u", scenario="hello"))
        assert body["assistantOverrides"]["variableValues"]["partnerName"] == "your partner"


class TestStartSession:
    @pytest.mark.asyncio
    async def test_starts_call(self, registry):
        adapter = TelephonyAdapter(VAPI, registry)
        with mock_http_client(_started()) as client:
            session = await adapter.start_session(REQUEST)

        assert session.provider_session_id == "call_123"
        assert session.call_link_or_number == "https://vapi.example/call/123"
        assert session.provider_meta["status"] == "queued"
        assert client.request.call_args.args == ("POST", "https://api.vapi.ai/call")
        assert sent_headers(client)["Authorization"] == "Bearer vapi-test-key"
        assert sent_json(client) == build_call_body(REQUEST)

    @pytest.mark.asyncio
    async def test_webhook_secret_used_as_token(self, registry):
        adapter = TelephonyAdapter(VapiConfig(webhook_secret="only-secret"), registry)
        with mock_http_client(_started()) as client:
            await adapter.start_session(REQUEST)

        assert sent_headers(client)["Authorization"] == "Bearer only-secret"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["id", "webCallUrl"])
    async def test_missing_session_data_fails(self, registry, missing):
        adapter = TelephonyAdapter(VAPI, registry)
        with mock_http_client(_started(**{missing: None})):
            with pytest.raises(FlowError) as exc_info:
                await adapter.start_session(REQUEST)

        assert exc_info.value.code is FlowErrorCode.PROVIDER_ENRICHMENT_FAILED
        assert exc_info.value.message == "Vapi response is missing required session data"


class TestStartSessionBestEffort:
    @pytest.mark.asyncio
    async def test_unconfigured_returns_mock_session(self, registry, clock):
        adapter = TelephonyAdapter(VapiConfig(), registry, clock=clock).best_effort()
        with mock_http_client(_started()) as client:
            session = await adapter.start_session(REQUEST)

        assert session == TelephonySession(
            provider_session_id="mock_1000000",
            call_link_or_number="https://example.com/mock-call/1000000",
            provider_meta={"mode": "mock"},
        )
        client.request.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_returns_fallback_session(self, registry, clock):
        adapter = TelephonyAdapter(VAPI, registry, clock=clock).best_effort()
        with mock_http_client(make_mock_response(status_code=503)):
            session = await adapter.start_session(REQUEST)

        assert session.provider_meta == {"mode": "fallback"}
        assert session.provider_session_id.startswith("fallback_")


class TestVerifyWebhook:
    def test_round_trip(self):
        body = '{"message":{"type":"status-update"}}'
        signature = hmac.new(b"vapi-hook", body.encode(), hashlib.sha256).hexdigest()
        adapter = TelephonyAdapter(VAPI)
        assert adapter.verify_webhook(body, signature) is True
        assert adapter.verify_webhook(body, None) is False

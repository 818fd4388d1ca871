"""Vapi telephony sessions.

Starts a web call with the Valentine concierge assistant. The scenario and
partner name are passed as assistant variables and echoed in the call
metadata so webhooks can be matched back to the user.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

from valentine_flows.config.providers import VapiConfig
from valentine_flows.core.providers.base import AdapterOptions, ProviderAdapter
from valentine_flows.core.providers.shared import read_json, verify_webhook_signature

if TYPE_CHECKING:
    from valentine_flows.core.ai.schemas import HotlineRequest

logger = logging.getLogger(__name__)

FIRST_MESSAGE = "Hi, I am your Valentine AI concierge. How can I make tonight special?"
DEFAULT_PARTNER_NAME = "your partner"


@dataclass(frozen=True)
class TelephonySession:
    """A started call and the link or number to join it."""

    provider_session_id: str
    call_link_or_number: str
    provider_meta: dict[str, Any] = field(default_factory=dict)


def build_call_body(request: "HotlineRequest") -> dict[str, Any]:
    """Build the ``POST /call`` body for *request*."""
    return {
        "customer": {"number": ""},
        "assistantOverrides": {
            "firstMessage": FIRST_MESSAGE,
            "variableValues": {
                "scenario": request.scenario,
                "partnerName": request.partner_name or DEFAULT_PARTNER_NAME,
            },
        },
        "metadata": {
            "userId": request.user_id,
            "scenario": request.scenario,
        },
    }


class TelephonyAdapter(ProviderAdapter):
    """Telephony capability backed by Vapi.

    Best-effort fallback: a placeholder session whose ``provider_meta``
    carries ``mode`` = ``"mock"`` (not configured) or ``"fallback"``.
    """

    provider = "vapi"
    breaker_key = "vapi-start-call"
    failure_message = "Vapi session start failed"
    default_timeout = 6.0

    def __init__(
        self,
        config: Optional[VapiConfig] = None,
        registry=None,
        *,
        clock: Optional[Callable[[], float]] = None,
        **kwargs: Any,
    ):
        super().__init__(config or VapiConfig(), registry, **kwargs)
        self._clock = clock or time.time

    async def start_session(
        self,
        request: "HotlineRequest",
        options: Optional[AdapterOptions] = None,
    ) -> TelephonySession:
        """Start a call for *request*.

        Strict mode requires both ``id`` and ``webCallUrl`` in the response.

        Raises:
            FlowError: In strict mode, on any failure
        """

        async def call() -> TelephonySession:
            self._require_config(self._config.is_configured, "Vapi API key is not configured")
            response = await self._request(
                "POST",
                f"{self._config.base_url.rstrip('/')}/call",
                options,
                headers={
                    "Authorization": f"Bearer {self._config.token}",
                    "Content-Type": "application/json",
                },
                json=build_call_body(request),
            )
            body = read_json(response, {})
            if not isinstance(body, dict) or not body.get("id") or not body.get("webCallUrl"):
                raise self._invalid("Vapi response is missing required session data")

            logger.debug("Vapi session %s started", body["id"])
            return TelephonySession(
                provider_session_id=str(body["id"]),
                call_link_or_number=str(body["webCallUrl"]),
                provider_meta=body,
            )

        mode = "fallback" if self._config.is_configured else "mock"
        return await self._run(call, fallback=self._placeholder_session(mode))

    def _placeholder_session(self, mode: str) -> TelephonySession:
        stamp = int(self._clock() * 1000)
        return TelephonySession(
            provider_session_id=f"{mode}_{stamp}",
            call_link_or_number=f"https://example.com/{mode}-call/{stamp}",
            provider_meta={"mode": mode},
        )

    def verify_webhook(self, body: Union[str, bytes], signature: Optional[str]) -> bool:
        """Check a Vapi server message against the webhook secret."""
        return verify_webhook_signature(body, signature, self._config.webhook_secret)

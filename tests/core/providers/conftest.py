"""Shared fixtures for provider adapter tests.

Provides configured adapter factories, a mock response builder and a
patched ``httpx.AsyncClient`` used across the per-provider test files.
"""

from contextlib import contextmanager
from typing import Any, Iterator, Optional
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from valentine_flows.config import (
    CloudinaryConfig,
    DeepgramConfig,
    ElevenLabsConfig,
    FastRouterConfig,
    FirecrawlConfig,
    OpenAIConfig,
    PerplexityConfig,
    VapiConfig,
)

# ---------------------------------------------------------------------------
# Configured provider settings
# ---------------------------------------------------------------------------

PERPLEXITY = PerplexityConfig(api_key="pplx-test-key")
FIRECRAWL = FirecrawlConfig(api_key="fc-test-key")
FASTROUTER = FastRouterConfig(api_key="fr-test-key", model="openai/gpt-test")
ELEVENLABS = ElevenLabsConfig(api_key="el-test-key", voice_id="voice-123")
CLOUDINARY = CloudinaryConfig(
    cloud_name="demo",
    api_key="cld-key",
    api_secret="cld-secret",
    webhook_secret="cld-hook",
)
VAPI = VapiConfig(api_key="vapi-test-key", webhook_secret="vapi-hook")
OPENAI = OpenAIConfig(api_key="sk-test-key")
DEEPGRAM = DeepgramConfig(api_key="dg-test-key")


# ---------------------------------------------------------------------------
# Mock response builder
# ---------------------------------------------------------------------------


def make_mock_response(
    *,
    status_code: int = 200,
    json_data: Any = None,
    text: str = "",
    content: bytes = b"",
    raise_json: bool = False,
) -> MagicMock:
    """Build a mock httpx.Response for provider tests.

    Args:
        status_code: HTTP status code.
        json_data: JSON body (returned by response.json()).
        text: Plain text body.
        content: Raw body bytes.
        raise_json: If True, response.json() raises ValueError.

    Returns:
        MagicMock configured as an httpx.Response.
    """
    response = MagicMock(spec=httpx.Response)
    response.status_code = status_code
    response.headers = {}
    response.text = text
    response.content = content

    if raise_json:
        response.json.side_effect = ValueError("No JSON")
    elif json_data is not None:
        response.json.return_value = json_data
    else:
        response.json.return_value = {}

    return response


def chat_completion(content: Optional[str], **extra: Any) -> dict:
    """Chat-completions body whose first choice carries *content*."""
    return {"choices": [{"message": {"role": "assistant", "content": content}}], **extra}


@contextmanager
def mock_http_client(*responses: Any, side_effect: Any = None) -> Iterator[AsyncMock]:
    """Patch ``httpx.AsyncClient`` so ``request`` returns *responses* in order.

    A single response is returned for every call. Pass *side_effect* to
    raise instead (e.g. ``httpx.ReadTimeout``).
    """
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = AsyncMock()
        if side_effect is not None:
            mock_client.request = AsyncMock(side_effect=side_effect)
        elif len(responses) == 1:
            mock_client.request = AsyncMock(return_value=responses[0])
        else:
            mock_client.request = AsyncMock(side_effect=list(responses))
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=None)
        mock_client_class.return_value = mock_client
        yield mock_client


def sent_json(mock_client: AsyncMock, call_index: int = 0) -> dict:
    """Return the ``json=`` payload of a recorded request."""
    return mock_client.request.call_args_list[call_index].kwargs["json"]


def sent_headers(mock_client: AsyncMock, call_index: int = 0) -> dict:
    return mock_client.request.call_args_list[call_index].kwargs["headers"]


@pytest.fixture
def timeout_error():
    return httpx.ReadTimeout("timed out")

"""Per-provider configuration dataclasses.

Each provider groups its credentials, endpoint and model settings into one
frozen object. ``is_configured`` answers the adapter config check: an
adapter whose config reports False fails with ``PROVIDER_CONFIG_MISSING``
before any network call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_FASTROUTER_API_URL = "https://go.fastrouter.ai/api/v1/chat/completions"
DEFAULT_FASTROUTER_MODEL = "openai/gpt-5.2"


@dataclass(frozen=True)
class PerplexityConfig:
    """Perplexity web search (chat completions with citations)."""

    api_key: Optional[str] = None
    base_url: str = "https://api.perplexity.ai"
    model: str = "sonar"

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


@dataclass(frozen=True)
class FirecrawlConfig:
    """Firecrawl scrape API."""

    api_key: Optional[str] = None
    base_url: str = "https://api.firecrawl.dev"

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


@dataclass(frozen=True)
class FastRouterConfig:
    """FastRouter OpenAI-compatible chat completions.

    ``api_url`` is the full completions endpoint, not a base URL.
    """

    api_key: Optional[str] = None
    api_url: str = DEFAULT_FASTROUTER_API_URL
    model: str = DEFAULT_FASTROUTER_MODEL

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


@dataclass(frozen=True)
class ElevenLabsConfig:
    """ElevenLabs text-to-speech.

    The voice id may also be supplied per call, so ``is_configured`` only
    covers the API key.
    """

    api_key: Optional[str] = None
    voice_id: Optional[str] = None
    base_url: str = "https://api.elevenlabs.io"
    model_id: str = "eleven_turbo_v2_5"
    output_format: str = "mp3_44100_128"

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


@dataclass(frozen=True)
class CloudinaryConfig:
    """Cloudinary signed uploads and webhook verification."""

    cloud_name: Optional[str] = None
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    webhook_secret: Optional[str] = None
    base_url: str = "https://api.cloudinary.com"
    delivery_url: str = "https://res.cloudinary.com"
    folder: str = "valentine/voice-assets"

    @property
    def is_configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)


@dataclass(frozen=True)
class VapiConfig:
    """Vapi voice-assistant calls.

    The webhook secret doubles as the bearer token when no API key is set.
    """

    api_key: Optional[str] = None
    webhook_secret: Optional[str] = None
    base_url: str = "https://api.vapi.ai"

    @property
    def token(self) -> Optional[str]:
        return self.api_key or self.webhook_secret

    @property
    def is_configured(self) -> bool:
        return bool(self.token)


@dataclass(frozen=True)
class OpenAIConfig:
    """OpenAI moderation endpoint."""

    api_key: Optional[str] = None
    base_url: str = "https://api.openai.com/v1"
    moderation_model: str = "omni-moderation-latest"

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


@dataclass(frozen=True)
class DeepgramConfig:
    """Deepgram pre-recorded transcription."""

    api_key: Optional[str] = None
    base_url: str = "https://api.deepgram.com"
    model: str = "nova-2"

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

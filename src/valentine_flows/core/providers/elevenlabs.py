"""ElevenLabs text-to-speech."""

import logging
from typing import Any, Optional
from urllib.parse import quote

from valentine_flows.config.providers import ElevenLabsConfig
from valentine_flows.core.providers.base import AdapterOptions, ProviderAdapter

logger = logging.getLogger(__name__)

VOICE_SETTINGS = {"stability": 0.4, "similarity_boost": 0.85}


class SpeechSynthesisAdapter(ProviderAdapter):
    """Speech synthesis capability backed by ElevenLabs.

    Best-effort fallback: ``None``.
    """

    provider = "elevenlabs"
    breaker_key = "elevenlabs-tts"
    failure_message = "ElevenLabs synthesis failed"
    default_timeout = 6.0

    def __init__(self, config: Optional[ElevenLabsConfig] = None, registry=None, **kwargs: Any):
        super().__init__(config or ElevenLabsConfig(), registry, **kwargs)

    async def synthesize(
        self,
        text: str,
        voice_id: Optional[str] = None,
        options: Optional[AdapterOptions] = None,
    ) -> Optional[bytes]:
        """Render *text* to MP3 audio.

        Args:
            text: Text to speak
            voice_id: Voice override; the configured voice is used when omitted
            options: Timeout/retry overrides (default: 6.0s, no retries)

        Returns:
            Non-empty MP3 bytes (``None`` only in best-effort mode)

        Raises:
            FlowError: In strict mode, on any failure
        """

        async def call() -> bytes:
            self._require_config(self._config.is_configured, "ElevenLabs API key is not configured")
            target_voice = voice_id or self._config.voice_id
            self._require_config(bool(target_voice), "ElevenLabs voice id is not configured")

            response = await self._request(
                "POST",
                f"{self._config.base_url.rstrip('/')}/v1/text-to-speech/{quote(target_voice, safe='')}",
                options,
                headers={
                    "xi-api-key": self._config.api_key,
                    "Content-Type": "application/json",
                },
                json={
                    "text": text,
                    "model_id": self._config.model_id,
                    "output_format": self._config.output_format,
                    "voice_settings": dict(VOICE_SETTINGS),
                },
            )
            audio = response.content
            if not isinstance(audio, (bytes, bytearray)) or len(audio) == 0:
                raise self._invalid("ElevenLabs returned empty audio payload")

            logger.debug("ElevenLabs returned %d audio bytes", len(audio))
            return bytes(audio)

        return await self._run(call, fallback=None)

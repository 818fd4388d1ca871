"""Deepgram transcription of hosted audio."""

import logging
from typing import Any, Optional

from valentine_flows.config.providers import DeepgramConfig
from valentine_flows.core.errors import validation_error
from valentine_flows.core.providers.base import AdapterOptions, ProviderAdapter
from valentine_flows.core.providers.shared import is_valid_url, read_json

logger = logging.getLogger(__name__)

DEEPGRAM_LISTEN_ENDPOINT = "/v1/listen"


def first_transcript(data: Any) -> str:
    """Return ``results.channels[0].alternatives[0].transcript``, stripped."""
    try:
        transcript = data["results"]["channels"][0]["alternatives"][0]["transcript"]
    except (KeyError, IndexError, TypeError):
        return ""
    return transcript.strip() if isinstance(transcript, str) else ""


class TranscriptionAdapter(ProviderAdapter):
    """Transcription capability backed by Deepgram.

    Best-effort fallback: ``""``.
    """

    provider = "deepgram"
    breaker_key = "deepgram-transcribe"
    failure_message = "Deepgram transcription failed"
    default_timeout = 6.0

    def __init__(self, config: Optional[DeepgramConfig] = None, registry=None, **kwargs: Any):
        super().__init__(config or DeepgramConfig(), registry, **kwargs)

    async def transcribe(self, audio_url: str, options: Optional[AdapterOptions] = None) -> str:
        """Transcribe the audio hosted at *audio_url*.

        Raises:
            FlowError: In strict mode: ``VALIDATION_ERROR`` for a non-http(s)
                URL, ``PROVIDER_ENRICHMENT_FAILED`` for an empty transcript,
                or any adapter failure
        """

        async def call() -> str:
            self._require_config(self._config.is_configured, "Deepgram API key is not configured")
            if not is_valid_url(audio_url):
                raise validation_error("audio_url must be an absolute http(s) URL", {"audio_url": audio_url})

            response = await self._request(
                "POST",
                f"{self._config.base_url.rstrip('/')}{DEEPGRAM_LISTEN_ENDPOINT}",
                options,
                params={"model": self._config.model},
                headers={
                    "Authorization": f"Token {self._config.api_key}",
                    "Content-Type": "application/json",
                },
                json={"url": audio_url},
            )
            transcript = first_transcript(read_json(response, {}))
            if not transcript:
                raise self._invalid("Deepgram returned empty transcript")

            logger.debug("Deepgram returned %d transcript characters", len(transcript))
            return transcript

        return await self._run(call, fallback="")

"""Fixtures for orchestrator tests.

Adapters are real strict instances whose capability methods are replaced
with AsyncMocks, so the orchestrator's strict-mode guard still applies.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from valentine_flows.config import FlowBudgets
from valentine_flows.core.ai import StrictOrchestrator
from valentine_flows.core.providers import (
    ContentModerationAdapter,
    LinkEnrichmentAdapter,
    MediaUploadAdapter,
    ModerationResult,
    SpeechSynthesisAdapter,
    StructuredGenerationAdapter,
    TelephonyAdapter,
    TranscriptionAdapter,
    WebContext,
    WebSearchAdapter,
)

from tests.core.providers.conftest import (
    CLOUDINARY,
    DEEPGRAM,
    ELEVENLABS,
    FASTROUTER,
    FIRECRAWL,
    OPENAI,
    PERPLEXITY,
    VAPI,
)

SEARCH_LINKS = ("https://venue-a.example/", "https://venue-b.example/")
WEB_CONTEXT = WebContext(summary="Candlelit places near the river", links=SEARCH_LINKS)
EXTRACTS = ["Venue A: tasting menu", "Venue B: rooftop view"]


@pytest.fixture
def adapters(registry):
    search = WebSearchAdapter(PERPLEXITY, registry)
    search.search = AsyncMock(return_value=WEB_CONTEXT)

    enrichment = LinkEnrichmentAdapter(FIRECRAWL, registry)
    enrichment.enrich = AsyncMock(return_value=list(EXTRACTS))

    generation = StructuredGenerationAdapter(FASTROUTER, registry)
    generation.generate = AsyncMock()

    speech = SpeechSynthesisAdapter(ELEVENLABS, registry)
    speech.synthesize = AsyncMock(return_value=b"mp3-bytes")

    media = MediaUploadAdapter(CLOUDINARY, registry)
    media.upload_audio = AsyncMock()

    telephony = TelephonyAdapter(VAPI, registry)
    telephony.start_session = AsyncMock()

    moderation = ContentModerationAdapter(OPENAI, registry)
    moderation.moderate = AsyncMock(return_value=ModerationResult(allowed=True))

    transcription = TranscriptionAdapter(DEEPGRAM, registry)
    transcription.transcribe = AsyncMock(return_value="meet me at eight")

    return SimpleNamespace(
        search=search,
        enrichment=enrichment,
        generation=generation,
        speech=speech,
        media=media,
        telephony=telephony,
        moderation=moderation,
        transcription=transcription,
    )


@pytest.fixture
def budgets():
    return FlowBudgets()


@pytest.fixture
def orchestrator(adapters, budgets):
    return StrictOrchestrator(
        search=adapters.search,
        enrichment=adapters.enrichment,
        generation=adapters.generation,
        speech=adapters.speech,
        media=adapters.media,
        telephony=adapters.telephony,
        budgets=budgets,
        moderation=adapters.moderation,
        transcription=adapters.transcription,
    )

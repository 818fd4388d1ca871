"""Strict orchestration of the guided flows.

Each flow composes strict provider adapters and either returns a complete
result or raises the first ``FlowError`` it meets. There is no partial
success, no fallback content and no orchestration-level retry: retrying
here would re-run steps that already succeeded.

Search-augmented flows (date plan, gift recommendations):

1. Build prompts from the request.
2. Strict web search; its failure aborts the flow.
3. Link enrichment and structured generation run concurrently and are
   joined all-or-nothing.
4. Gift flow only: rank, then keep the top five recommendations.
5. Assemble a ``StrictResult`` with the search links as sources.

Steps 2-5 run under a flow-level deadline (8s by default) that raises
``PROVIDER_TIMEOUT`` with provider ``"orchestrator"``.

Example:
    orchestrator = build_strict_orchestrator(get_config())
    result = await orchestrator.generate_date_plan(
        DatePlanRequest(city="Lisbon", budget=180, vibe="cozy"),
    )
    print(result.payload.itinerary, result.sources.reference_links)
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from ulid import ULID

from valentine_flows.config import AppConfig, FlowBudgets, get_config
from valentine_flows.core.ai.prompts import (
    build_date_plan_prompts,
    build_gift_prompts,
    build_love_letter_prompts,
    date_plan_search_query,
    gift_search_query,
    with_web_context,
)
from valentine_flows.core.ai.ranking import MAX_RECOMMENDATIONS, rank_recommendations
from valentine_flows.core.ai.schemas import (
    CardPreviewRequest,
    DatePlanPayload,
    DatePlanRequest,
    GiftPayload,
    GiftRequest,
    HotlineRequest,
    LoveLetterPayload,
    LoveLetterRequest,
    TranscriptionRequest,
    VoiceNoteRequest,
)
from valentine_flows.core.concurrency import gather_fail_fast
from valentine_flows.core.errors import FlowError, FlowErrorCode, config_missing, validation_error
from valentine_flows.core.network import with_global_timeout
from valentine_flows.core.observability import audit_log
from valentine_flows.core.providers import (
    AdapterOptions,
    ContentModerationAdapter,
    FailureMode,
    LinkEnrichmentAdapter,
    MediaUploadAdapter,
    ModerationResult,
    SpeechSynthesisAdapter,
    StructuredGenerationAdapter,
    TelephonyAdapter,
    TelephonySession,
    TranscriptionAdapter,
    WebContext,
    WebSearchAdapter,
)
from valentine_flows.core.resilience import ResilienceRegistry

logger = logging.getLogger(__name__)

P = TypeVar("P")
T = TypeVar("T")

ORCHESTRATOR_PROVIDER = "orchestrator"
VOICE_ASSET_PREFIX = "voice-"


@dataclass(frozen=True)
class ResultSources:
    """Where a strict result's context came from."""

    reference_links: tuple[str, ...]
    enrichment_extract_count: int

    def __post_init__(self) -> None:
        if self.enrichment_extract_count < 0:
            raise ValueError("enrichment_extract_count must be >= 0")


@dataclass(frozen=True)
class StrictResult(Generic[P]):
    """Validated payload plus source metadata from a search-augmented flow."""

    payload: P
    sources: ResultSources
    provider_meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        payload = self.payload.model_dump() if hasattr(self.payload, "model_dump") else self.payload
        return {
            "payload": payload,
            "sources": {
                "reference_links": list(self.sources.reference_links),
                "enrichment_extract_count": self.sources.enrichment_extract_count,
            },
            "provider_meta": dict(self.provider_meta),
        }


@dataclass(frozen=True)
class VoiceNoteResult:
    """A synthesized and uploaded voice note."""

    audio_url: str
    provider_asset_id: str

    def to_dict(self) -> dict[str, Any]:
        return {"audio_url": self.audio_url, "provider_asset_id": self.provider_asset_id}


@dataclass(frozen=True)
class CardPreview:
    """A rendered memory-card preview."""

    preview_url: str
    source_public_id: str

    def to_dict(self) -> dict[str, Any]:
        return {"preview_url": self.preview_url, "source_public_id": self.source_public_id}


def _require_strict(role: str, adapter: Any) -> None:
    if getattr(adapter, "mode", None) is not FailureMode.STRICT:
        raise TypeError(f"StrictOrchestrator requires a strict {role} adapter, got {adapter!r}")


class StrictOrchestrator:
    """Runs guided flows over strict adapters.

    Construction fails with ``TypeError`` if any supplied adapter is not in
    ``FailureMode.STRICT``. Speech, media, telephony, moderation and
    transcription adapters are optional; the operations that need them
    raise ``PROVIDER_CONFIG_MISSING`` when they are absent.
    """

    def __init__(
        self,
        search: WebSearchAdapter,
        enrichment: LinkEnrichmentAdapter,
        generation: StructuredGenerationAdapter,
        speech: Optional[SpeechSynthesisAdapter] = None,
        media: Optional[MediaUploadAdapter] = None,
        telephony: Optional[TelephonyAdapter] = None,
        budgets: Optional[FlowBudgets] = None,
        moderation: Optional[ContentModerationAdapter] = None,
        transcription: Optional[TranscriptionAdapter] = None,
    ):
        adapters = {
            "search": search,
            "enrichment": enrichment,
            "generation": generation,
            "speech": speech,
            "media": media,
            "telephony": telephony,
            "moderation": moderation,
            "transcription": transcription,
        }
        for role, adapter in adapters.items():
            if adapter is not None:
                _require_strict(role, adapter)

        self._search = search
        self._enrichment = enrichment
        self._generation = generation
        self._speech = speech
        self._media = media
        self._telephony = telephony
        self._moderation = moderation
        self._transcription = transcription
        self._budgets = budgets or FlowBudgets()

    @property
    def budgets(self) -> FlowBudgets:
        return self._budgets

    def _options(self, timeout: float) -> AdapterOptions:
        return AdapterOptions(timeout=timeout, retries=self._budgets.provider_retries)

    async def _guarded(
        self,
        flow: str,
        steps: Callable[[], Awaitable[T]],
        timeout: Optional[float] = None,
    ) -> T:
        """Run *steps*, optionally under a flow deadline, and record the outcome."""
        started = time.perf_counter()
        try:
            if timeout is None:
                result = await steps()
            else:
                result = await with_global_timeout(
                    steps,
                    timeout,
                    FlowError.from_code(
                        FlowErrorCode.PROVIDER_TIMEOUT,
                        f"{flow} orchestration exceeded timeout budget",
                        provider=ORCHESTRATOR_PROVIDER,
                    ),
                    cancel_on_timeout=self._budgets.cancel_on_timeout,
                )
        except FlowError as e:
            duration_ms = round((time.perf_counter() - started) * 1000, 2)
            event = (
                "flow_timeout"
                if e.provider == ORCHESTRATOR_PROVIDER and e.code is FlowErrorCode.PROVIDER_TIMEOUT
                else "flow_failed"
            )
            audit_log(
                event,
                flow=flow,
                code=e.code.value,
                provider=e.provider,
                duration_ms=duration_ms,
            )
            logger.info("Flow %s failed with %s from %s", flow, e.code.value, e.provider)
            raise

        audit_log(
            "flow_completed",
            flow=flow,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return result

    def _assemble(self, payload: P, context: WebContext, extracts: list[str]) -> StrictResult[P]:
        return StrictResult(
            payload=payload,
            sources=ResultSources(
                reference_links=tuple(context.links),
                enrichment_extract_count=len(extracts),
            ),
            provider_meta={
                "fastrouter_model": getattr(self._generation, "model", "fastrouter"),
                "perplexity_links_used": len(context.links),
                "firecrawl_extracts_count": len(extracts),
            },
        )

    async def _search_then_generate(
        self,
        query: str,
        system_prompt: str,
        user_prompt: str,
        validator: Any,
    ) -> tuple[WebContext, list[str], Any]:
        context = await self._search.search(query, self._options(self._budgets.search_timeout))
        extracts, generated = await gather_fail_fast(
            self._enrichment.enrich(
                context.links,
                self._options(self._budgets.enrichment_timeout),
            ),
            self._generation.generate(
                system_prompt,
                with_web_context(user_prompt, context.summary, context.links),
                validator,
                self._options(self._budgets.generation_timeout),
            ),
        )
        return context, extracts, generated

    # ------------------------------------------------------------------
    # Flows
    # ------------------------------------------------------------------

    async def generate_date_plan(self, request: DatePlanRequest) -> StrictResult[DatePlanPayload]:
        """Plan a date from web context and structured generation.

        Raises:
            FlowError: From the first failing adapter, or the flow deadline
        """

        async def steps() -> StrictResult[DatePlanPayload]:
            prompts = build_date_plan_prompts(request)
            context, extracts, plan = await self._search_then_generate(
                date_plan_search_query(request),
                prompts.system,
                prompts.user,
                DatePlanPayload,
            )
            return self._assemble(plan, context, extracts)

        return await self._guarded("date_plan", steps, self._budgets.flow_timeout)

    async def generate_gift_recommendations(self, request: GiftRequest) -> StrictResult[GiftPayload]:
        """Recommend up to five ranked gifts.

        The generated links are kept when present; otherwise the search
        links are returned as the gift links.

        Raises:
            FlowError: From the first failing adapter, or the flow deadline
        """

        async def steps() -> StrictResult[GiftPayload]:
            prompts = build_gift_prompts(request)
            context, extracts, generated = await self._search_then_generate(
                gift_search_query(request),
                prompts.system,
                prompts.user,
                GiftPayload,
            )
            ranked = rank_recommendations(generated.recommendations, request.budget, request.interests)
            gift = generated.model_copy(
                update={
                    "recommendations": ranked[:MAX_RECOMMENDATIONS],
                    "links": list(generated.links) or list(context.links),
                }
            )
            return self._assemble(gift, context, extracts)

        return await self._guarded("gift_recommendations", steps, self._budgets.flow_timeout)

    async def generate_love_letter(self, request: LoveLetterRequest) -> LoveLetterPayload:
        """Write a love letter with one strict generation call.

        No flow deadline applies; the generation timeout bounds the call.
        """
        prompts = build_love_letter_prompts(request)

        async def steps() -> LoveLetterPayload:
            return await self._generation.generate(
                prompts.system,
                prompts.user,
                LoveLetterPayload,
                self._options(self._budgets.generation_timeout),
            )

        return await self._guarded("love_letter", steps)

    async def create_voice_note(self, request: VoiceNoteRequest) -> VoiceNoteResult:
        """Synthesize *request.text* and upload the audio.

        Synthesis must succeed before any upload is attempted. Both steps
        run under the voice-note deadline (12s by default).
        """
        if self._speech is None:
            raise config_missing(ORCHESTRATOR_PROVIDER, "Speech synthesis adapter is not configured")
        if self._media is None:
            raise config_missing(ORCHESTRATOR_PROVIDER, "Media upload adapter is not configured")
        speech, media = self._speech, self._media

        async def steps() -> VoiceNoteResult:
            audio = await speech.synthesize(
                request.text,
                request.voice_id,
                self._options(self._budgets.speech_timeout),
            )
            uploaded = await media.upload_audio(
                audio,
                f"{VOICE_ASSET_PREFIX}{ULID()}",
                self._options(self._budgets.upload_timeout),
            )
            return VoiceNoteResult(audio_url=uploaded.url, provider_asset_id=uploaded.provider_id)

        return await self._guarded("voice_note", steps, self._budgets.voice_note_timeout)

    async def start_hotline_session(self, request: HotlineRequest) -> TelephonySession:
        """Start an AI hotline call with one strict telephony call."""
        if self._telephony is None:
            raise config_missing(ORCHESTRATOR_PROVIDER, "Telephony adapter is not configured")
        telephony = self._telephony

        async def steps() -> TelephonySession:
            return await telephony.start_session(
                request,
                self._options(self._budgets.telephony_timeout),
            )

        return await self._guarded("hotline_session", steps)

    async def moderate_text(self, text: str) -> ModerationResult:
        """Screen *text* with the moderation adapter.

        A blocked verdict is returned, not raised; see ``render_card_preview``
        for a flow that refuses blocked input.
        """
        if self._moderation is None:
            raise config_missing(ORCHESTRATOR_PROVIDER, "Moderation adapter is not configured")
        moderation = self._moderation

        async def steps() -> ModerationResult:
            return await moderation.moderate(text, self._options(self._budgets.moderation_timeout))

        return await self._guarded("moderation", steps)

    async def transcribe_audio(self, request: TranscriptionRequest) -> str:
        """Transcribe hosted audio; an empty transcript is a failure."""
        if self._transcription is None:
            raise config_missing(ORCHESTRATOR_PROVIDER, "Transcription adapter is not configured")
        transcription = self._transcription

        async def steps() -> str:
            return await transcription.transcribe(
                request.audio_url,
                self._options(self._budgets.transcription_timeout),
            )

        return await self._guarded("transcription", steps)

    async def render_card_preview(self, request: CardPreviewRequest) -> CardPreview:
        """Moderate the card message, then build its Cloudinary preview URL.

        The message is moderated only when a moderation adapter is wired.
        There is no fallback to the untransformed photo.

        Raises:
            FlowError: ``VALIDATION_ERROR`` if moderation blocks the message,
                ``PROVIDER_CONFIG_MISSING`` if Cloudinary is unavailable
        """
        if self._media is None:
            raise config_missing(ORCHESTRATOR_PROVIDER, "Media upload adapter is not configured")
        media, moderation = self._media, self._moderation

        async def steps() -> CardPreview:
            if moderation is not None:
                verdict = await moderation.moderate(
                    request.message_text,
                    self._options(self._budgets.moderation_timeout),
                )
                if not verdict.allowed:
                    raise validation_error("Input blocked by moderation", verdict.reason)
            preview_url = media.build_card_preview_url(request.source_public_id, request.message_text)
            return CardPreview(preview_url=preview_url, source_public_id=request.source_public_id)

        return await self._guarded("card_preview", steps)


def build_strict_orchestrator(
    config: Optional[AppConfig] = None,
    registry: Optional[ResilienceRegistry] = None,
) -> StrictOrchestrator:
    """Wire strict adapters from *config* around one shared breaker registry."""
    cfg = config or get_config()
    shared = registry if registry is not None else ResilienceRegistry()
    return StrictOrchestrator(
        search=WebSearchAdapter(cfg.perplexity, shared),
        enrichment=LinkEnrichmentAdapter(cfg.firecrawl, shared),
        generation=StructuredGenerationAdapter(cfg.fastrouter, shared),
        speech=SpeechSynthesisAdapter(cfg.elevenlabs, shared),
        media=MediaUploadAdapter(cfg.cloudinary, shared),
        telephony=TelephonyAdapter(cfg.vapi, shared),
        budgets=cfg.flow_budgets,
        moderation=ContentModerationAdapter(cfg.openai, shared),
        transcription=TranscriptionAdapter(cfg.deepgram, shared),
    )

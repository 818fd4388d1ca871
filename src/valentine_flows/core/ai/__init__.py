"""Guided flows: request/payload schemas, prompts, ranking and the strict orchestrator."""

from valentine_flows.core.ai.orchestrator import (
    CardPreview,
    ResultSources,
    StrictOrchestrator,
    StrictResult,
    VoiceNoteResult,
    build_strict_orchestrator,
)
from valentine_flows.core.ai.ranking import (
    MAX_RECOMMENDATIONS,
    rank_recommendations,
    score_recommendation,
)
from valentine_flows.core.ai.schemas import (
    CardPreviewRequest,
    DatePlanPayload,
    DatePlanRequest,
    GiftPayload,
    GiftRecommendation,
    GiftRequest,
    HotlineRequest,
    ItineraryItem,
    LoveLetterPayload,
    LoveLetterRequest,
    ModerationRequest,
    TranscriptionRequest,
    VenueOption,
    VoiceNoteRequest,
    parse_request,
)

__all__ = [
    # Orchestrator
    "CardPreview",
    "ResultSources",
    "StrictOrchestrator",
    "StrictResult",
    "VoiceNoteResult",
    "build_strict_orchestrator",
    # Ranking
    "MAX_RECOMMENDATIONS",
    "rank_recommendations",
    "score_recommendation",
    # Schemas
    "CardPreviewRequest",
    "DatePlanPayload",
    "DatePlanRequest",
    "GiftPayload",
    "GiftRecommendation",
    "GiftRequest",
    "HotlineRequest",
    "ItineraryItem",
    "LoveLetterPayload",
    "LoveLetterRequest",
    "ModerationRequest",
    "TranscriptionRequest",
    "VenueOption",
    "VoiceNoteRequest",
    "parse_request",
]

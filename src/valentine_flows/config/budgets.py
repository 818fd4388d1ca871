"""Timeout budgets for the strict flows."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FlowBudgets:
    """Per-call and per-flow time budgets, in seconds.

    Flow-level deadlines must exceed the per-call timeouts they wrap, so
    the flow deadline is what bounds chained adapter calls.
    """

    search_timeout: float = 4.0
    enrichment_timeout: float = 4.0
    generation_timeout: float = 6.0
    speech_timeout: float = 6.0
    upload_timeout: float = 6.0
    telephony_timeout: float = 6.0
    moderation_timeout: float = 6.0
    transcription_timeout: float = 6.0
    provider_retries: int = 0
    flow_timeout: float = 8.0
    voice_note_timeout: float = 12.0
    cancel_on_timeout: bool = False

    def __post_init__(self) -> None:
        if self.provider_retries < 0:
            raise ValueError(f"provider_retries must be >= 0, got {self.provider_retries}")
        for name in (
            "search_timeout",
            "enrichment_timeout",
            "generation_timeout",
            "speech_timeout",
            "upload_timeout",
            "telephony_timeout",
            "moderation_timeout",
            "transcription_timeout",
            "flow_timeout",
            "voice_note_timeout",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")

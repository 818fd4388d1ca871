"""Prompt builders for structured generation and web search."""

from dataclasses import dataclass
from typing import Sequence

from valentine_flows.core.ai.schemas import DatePlanRequest, GiftRequest, LoveLetterRequest


@dataclass(frozen=True)
class PromptPair:
    system: str
    user: str


def build_date_plan_prompts(request: DatePlanRequest) -> PromptPair:
    return PromptPair(
        system=(
            "You are a Valentine concierge. Return strict JSON with keys: "
            "itinerary, venue_options, estimated_cost, rationale."
        ),
        user=(
            f"City: {request.city}\n"
            f"Budget USD: {request.budget}\n"
            f"Vibe: {request.vibe}\n"
            f"Dietary: {request.dietary or 'none'}\n"
            f"Date time: {request.date_time or 'not specified'}\n"
            "Create a practical plan with 3 to 5 itinerary items."
        ),
    )


def build_gift_prompts(request: GiftRequest) -> PromptPair:
    return PromptPair(
        system=(
            "You recommend thoughtful gifts. Return strict JSON with keys: "
            "recommendations, explanation, links."
        ),
        user=(
            f"Interests: {', '.join(request.interests)}\n"
            f"Budget USD: {request.budget}\n"
            f"Constraints: {request.constraints or 'none'}\n"
            "Create 3 to 5 gift options with estimated_price integer."
        ),
    )


def build_love_letter_prompts(request: LoveLetterRequest) -> PromptPair:
    memories = "\n".join(f"{index}. {memory}" for index, memory in enumerate(request.memories, start=1))
    return PromptPair(
        system=(
            "You write heartfelt but tasteful romantic content. Return strict JSON with keys: "
            "letter_text, short_sms, caption_versions."
        ),
        user=(
            f"Partner name: {request.partner_name}\n"
            f"Tone: {request.tone}\n"
            f"Length: {request.length}\n"
            f"Memories:\n{memories}"
        ),
    )


def date_plan_search_query(request: DatePlanRequest) -> str:
    return f"Top romantic date venues in {request.city} for {request.vibe} vibe within {request.budget} USD"


def gift_search_query(request: GiftRequest) -> str:
    return (
        f"Best gift ideas for interests: {', '.join(request.interests)} "
        f"under {request.budget} USD with constraints: {request.constraints or 'none'}"
    )


def with_web_context(user_prompt: str, summary: str, links: Sequence[str]) -> str:
    """Append the search summary and links to a user prompt."""
    joined = "\n".join(links)
    return f"{user_prompt}\n\nWeb summary:\n{summary}\nLinks:\n{joined}\n"

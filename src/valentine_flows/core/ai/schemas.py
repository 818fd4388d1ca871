"""Request and payload models for the guided flows.

Request models validate caller input before a flow runs; payload models
validate what structured generation returns. Unknown keys are ignored in
both directions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, List, Literal, Mapping, Optional, Type, TypeVar

from pydantic import AfterValidator, BaseModel, Field, ValidationError, field_validator

from valentine_flows.core.errors import validation_error
from valentine_flows.core.providers.shared import is_valid_url

R = TypeVar("R", bound=BaseModel)


def _check_url(value: str) -> str:
    if not is_valid_url(value):
        raise ValueError("must be an absolute http(s) URL")
    return value


Link = Annotated[str, AfterValidator(_check_url)]


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class DatePlanRequest(BaseModel):
    """Input for the date-plan flow."""

    city: str = Field(..., min_length=2, max_length=100)
    budget: int = Field(..., ge=1, le=100000, description="Budget in USD")
    vibe: str = Field(..., min_length=2, max_length=100)
    dietary: Optional[str] = Field(default=None, max_length=200)
    date_time: Optional[str] = Field(default=None, description="ISO 8601 date-time")

    @field_validator("date_time")
    @classmethod
    def validate_date_time(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        try:
            datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise ValueError("must be an ISO 8601 date-time") from e
        return value


class GiftRequest(BaseModel):
    """Input for the gift-recommendation flow."""

    interests: List[str] = Field(..., min_length=1)
    budget: int = Field(..., ge=1, le=100000, description="Budget in USD")
    constraints: Optional[str] = Field(default=None, max_length=300)


class LoveLetterRequest(BaseModel):
    """Input for the love-letter flow."""

    tone: str = Field(..., min_length=2, max_length=50)
    length: Literal["short", "medium", "long"]
    memories: List[str] = Field(..., min_length=1, max_length=8)
    partner_name: str = Field(..., min_length=1, max_length=100)


class VoiceNoteRequest(BaseModel):
    """Input for the voice-note flow."""

    text: str = Field(..., min_length=2, max_length=2000)
    voice_id: Optional[str] = Field(default=None, max_length=120)
    style: Optional[str] = Field(default=None, max_length=80)


class HotlineRequest(BaseModel):
    """Input for starting an AI hotline call."""

    user_id: str = Field(..., min_length=1)
    scenario: str = Field(..., min_length=2, max_length=300)
    partner_name: Optional[str] = Field(default=None, max_length=100)


class CardPreviewRequest(BaseModel):
    """Input for rendering a memory-card preview."""

    source_public_id: str = Field(..., min_length=1, max_length=255, description="Cloudinary public id")
    message_text: str = Field(..., min_length=1, max_length=240)


class TranscriptionRequest(BaseModel):
    """Input for transcribing hosted audio."""

    audio_url: Link


class ModerationRequest(BaseModel):
    text: str = Field(..., max_length=5000)


# ---------------------------------------------------------------------------
# Generated payloads
# ---------------------------------------------------------------------------


class ItineraryItem(BaseModel):
    time: str
    activity: str
    details: str


class VenueOption(BaseModel):
    name: str
    reason: str
    link: Optional[Link] = None


class DatePlanPayload(BaseModel):
    """Generated date plan."""

    itinerary: List[ItineraryItem]
    venue_options: List[VenueOption]
    estimated_cost: int = Field(..., ge=0)
    rationale: str


class GiftRecommendation(BaseModel):
    title: str
    reason: str
    estimated_price: int = Field(..., ge=0)


class GiftPayload(BaseModel):
    """Generated gift recommendations."""

    recommendations: List[GiftRecommendation]
    explanation: str
    links: List[Link]


class LoveLetterPayload(BaseModel):
    """Generated love letter with short-form variants."""

    letter_text: str
    short_sms: str
    caption_versions: List[str]


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_request(model: Type[R], data: Mapping[str, Any]) -> R:
    """Validate caller *data* against request *model*.

    Raises:
        FlowError: ``VALIDATION_ERROR`` with the flattened error list as details.
    """
    try:
        return model.model_validate(data)
    except ValidationError as e:
        issues = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise validation_error(f"Invalid {model.__name__}", issues) from e

"""Tests for request/payload models and parse_request."""

import pytest
from pydantic import ValidationError

from valentine_flows.core.ai import (
    DatePlanPayload,
    DatePlanRequest,
    GiftPayload,
    HotlineRequest,
    LoveLetterRequest,
    VoiceNoteRequest,
    parse_request,
)
from valentine_flows.core.errors import FlowError, FlowErrorCode


class TestParseRequest:
    def test_valid_request(self):
        request = parse_request(DatePlanRequest, {"city": "Rome", "budget": 200, "vibe": "romantic"})
        assert request.city == "Rome"
        assert request.dietary is None

    def test_invalid_request_raises_validation_error(self):
        with pytest.raises(FlowError) as exc_info:
            parse_request(DatePlanRequest, {"city": "R", "budget": 0})

        err = exc_info.value
        assert err.code is FlowErrorCode.VALIDATION_ERROR
        assert err.status == 400
        assert err.message == "Invalid DatePlanRequest"
        fields = {issue["field"] for issue in err.details}
        assert fields == {"city", "budget", "vibe"}

    def test_nested_field_paths(self):
        with pytest.raises(FlowError) as exc_info:
            parse_request(LoveLetterRequest, {"tone": "warm", "length": "short", "memories": [1], "partner_name": "A"})
        assert exc_info.value.details[0]["field"] == "memories.0"


class TestRequestConstraints:
    def test_date_time_must_be_iso(self):
        DatePlanRequest(city="Rome", budget=10, vibe="fun", date_time="2027-02-14T19:30:00Z")
        with pytest.raises(ValidationError):
            DatePlanRequest(city="Rome", budget=10, vibe="fun", date_time="next friday")

    def test_love_letter_length_and_memories(self):
        with pytest.raises(ValidationError):
            LoveLetterRequest(tone="warm", length="epic", memories=["a"], partner_name="Sam")
        with pytest.raises(ValidationError):
            LoveLetterRequest(tone="warm", length="short", memories=[], partner_name="Sam")
        with pytest.raises(ValidationError):
            LoveLetterRequest(tone="warm", length="short", memories=["m"] * 9, partner_name="Sam")

    def test_voice_note_text_bounds(self):
        with pytest.raises(ValidationError):
            VoiceNoteRequest(text="x")
        with pytest.raises(ValidationError):
            VoiceNoteRequest(text="x" * 2001)

    def test_hotline_requires_user(self):
        with pytest.raises(ValidationError):
            HotlineRequest(user_id="", scenario="Say hi")


class TestPayloads:
    def test_venue_link_must_be_http(self):
        base = {
            "itinerary": [],
            "venue_options": [{"name": "A", "reason": "b", "link": "javascript:alert(1)"}],
            "estimated_cost": 10,
            "rationale": "r",
        }
        with pytest.raises(ValidationError):
            DatePlanPayload.model_validate(base)

        base["venue_options"][0]["link"] = None
        assert DatePlanPayload.model_validate(base).venue_options[0].link is None

    def test_gift_links_validated(self):
        with pytest.raises(ValidationError):
            GiftPayload.model_validate({"recommendations": [], "explanation": "x", "links": ["not-a-url"]})

    def test_negative_cost_rejected(self):
        with pytest.raises(ValidationError):
            DatePlanPayload.model_validate(
                {"itinerary": [], "venue_options": [], "estimated_cost": -1, "rationale": "r"}
            )

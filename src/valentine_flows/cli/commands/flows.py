"""Run a guided flow from a JSON request."""

import asyncio
import json
import logging
from dataclasses import asdict
from typing import Any, Awaitable, Callable, Dict, Tuple, Type

import click
from pydantic import BaseModel

from valentine_flows.cli.context import get_context
from valentine_flows.cli.output import emit_error, emit_flow_error, emit_success
from valentine_flows.core.ai import (
    CardPreviewRequest,
    DatePlanRequest,
    GiftRequest,
    HotlineRequest,
    LoveLetterRequest,
    ModerationRequest,
    StrictOrchestrator,
    TranscriptionRequest,
    VoiceNoteRequest,
    build_strict_orchestrator,
    parse_request,
)
from valentine_flows.core.errors import FlowError

logger = logging.getLogger(__name__)


async def _date_plan(orchestrator: StrictOrchestrator, request: Any) -> Any:
    return (await orchestrator.generate_date_plan(request)).to_dict()


async def _gift(orchestrator: StrictOrchestrator, request: Any) -> Any:
    return (await orchestrator.generate_gift_recommendations(request)).to_dict()


async def _love_letter(orchestrator: StrictOrchestrator, request: Any) -> Any:
    return (await orchestrator.generate_love_letter(request)).model_dump()


async def _voice_note(orchestrator: StrictOrchestrator, request: Any) -> Any:
    return (await orchestrator.create_voice_note(request)).to_dict()


async def _hotline(orchestrator: StrictOrchestrator, request: Any) -> Any:
    return asdict(await orchestrator.start_hotline_session(request))


async def _card_preview(orchestrator: StrictOrchestrator, request: Any) -> Any:
    return (await orchestrator.render_card_preview(request)).to_dict()


async def _moderate(orchestrator: StrictOrchestrator, request: Any) -> Any:
    return asdict(await orchestrator.moderate_text(request.text))


async def _transcribe(orchestrator: StrictOrchestrator, request: Any) -> Any:
    return {"transcript": await orchestrator.transcribe_audio(request)}


Runner = Callable[[StrictOrchestrator, Any], Awaitable[Any]]

# flow name -> (request model, runner, route label)
FLOWS: Dict[str, Tuple[Type[BaseModel], Runner, str]] = {
    "date-plan": (DatePlanRequest, _date_plan, "/api/plan/date"),
    "gift": (GiftRequest, _gift, "/api/gifts"),
    "love-letter": (LoveLetterRequest, _love_letter, "/api/letters"),
    "voice-note": (VoiceNoteRequest, _voice_note, "/api/voice-notes"),
    "hotline": (HotlineRequest, _hotline, "/api/hotline"),
    "card-preview": (CardPreviewRequest, _card_preview, "/api/cards/generate"),
    "moderate": (ModerationRequest, _moderate, "/api/moderation"),
    "transcribe": (TranscriptionRequest, _transcribe, "/api/content/transcribe"),
}


@click.command("run")
@click.argument("flow", type=click.Choice(sorted(FLOWS)))
@click.option(
    "--input",
    "input_file",
    type=click.File("r"),
    default="-",
    show_default=True,
    help="JSON request file ('-' reads stdin).",
)
@click.pass_context
def run_cmd(ctx: click.Context, flow: str, input_file: Any) -> None:
    """Run FLOW against the configured providers and print the result."""
    model, runner, route = FLOWS[flow]

    try:
        data = json.load(input_file)
    except json.JSONDecodeError as e:
        emit_error(
            f"Request is not valid JSON: {e}",
            code="VALIDATION_ERROR",
            remediation="Pass a JSON object with --input",
        )
    if not isinstance(data, dict):
        emit_error(
            "Request must be a JSON object",
            code="VALIDATION_ERROR",
            remediation="Pass a JSON object with --input",
        )

    config = get_context(ctx).config
    try:
        request = parse_request(model, data)
        orchestrator = build_strict_orchestrator(config)
        result = asyncio.run(runner(orchestrator, request))
    except FlowError as e:
        logger.debug("Flow %s failed: %s", flow, e)
        emit_flow_error(e, route=route)

    emit_success(result)

"""Provider readiness report."""

from dataclasses import asdict

import click

from valentine_flows.cli.context import get_context
from valentine_flows.cli.output import emit_success
from valentine_flows.config import provider_readiness
from valentine_flows.core.providers import (
    ContentModerationAdapter,
    LinkEnrichmentAdapter,
    MediaUploadAdapter,
    SpeechSynthesisAdapter,
    StructuredGenerationAdapter,
    TelephonyAdapter,
    TranscriptionAdapter,
    WebSearchAdapter,
)

_ADAPTERS = (
    WebSearchAdapter,
    LinkEnrichmentAdapter,
    StructuredGenerationAdapter,
    SpeechSynthesisAdapter,
    MediaUploadAdapter,
    TelephonyAdapter,
    ContentModerationAdapter,
    TranscriptionAdapter,
)


@click.command("status")
@click.pass_context
def status_cmd(ctx: click.Context) -> None:
    """Show which providers are configured and the active time budgets."""
    config = get_context(ctx).config
    emit_success(
        {
            "environment": config.environment,
            "providers": provider_readiness(config),
            "breakers": {adapter.breaker_key: adapter.provider for adapter in _ADAPTERS},
            "budgets": asdict(config.flow_budgets),
            "production_missing": config.validate_for_production(),
            "warnings": list(config.startup_warnings),
        }
    )

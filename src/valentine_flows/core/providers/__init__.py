"""Provider adapters for valentine-flows.

One adapter class per capability. Each adapter is strict by default and
offers ``best_effort()`` for call sites that prefer a fallback value over
an error.

Example:
    from valentine_flows.core.providers import WebSearchAdapter
    from valentine_flows.core.resilience import ResilienceRegistry

    registry = ResilienceRegistry()
    search = WebSearchAdapter(config.perplexity, registry)
    context = await search.search("romantic dinner Lisbon")
"""

from valentine_flows.core.providers.base import (
    AdapterOptions,
    FailureMode,
    ProviderAdapter,
)
from valentine_flows.core.providers.cloudinary import (
    MediaUploadAdapter,
    UploadedMedia,
    UploadSignature,
    escape_overlay_text,
    sign_params,
)
from valentine_flows.core.providers.deepgram import TranscriptionAdapter
from valentine_flows.core.providers.elevenlabs import SpeechSynthesisAdapter
from valentine_flows.core.providers.fastrouter import StructuredGenerationAdapter
from valentine_flows.core.providers.firecrawl import LinkEnrichmentAdapter
from valentine_flows.core.providers.moderation import (
    ContentModerationAdapter,
    ModerationResult,
    check_blocklist,
)
from valentine_flows.core.providers.perplexity import (
    EMPTY_WEB_CONTEXT,
    WebContext,
    WebSearchAdapter,
)
from valentine_flows.core.providers.shared import (
    is_valid_url,
    safe_json_parse,
    verify_webhook_signature,
)
from valentine_flows.core.providers.vapi import TelephonyAdapter, TelephonySession

__all__ = [
    # Base
    "AdapterOptions",
    "FailureMode",
    "ProviderAdapter",
    # Adapters
    "ContentModerationAdapter",
    "LinkEnrichmentAdapter",
    "MediaUploadAdapter",
    "SpeechSynthesisAdapter",
    "StructuredGenerationAdapter",
    "TelephonyAdapter",
    "TranscriptionAdapter",
    "WebSearchAdapter",
    # Results
    "EMPTY_WEB_CONTEXT",
    "ModerationResult",
    "TelephonySession",
    "UploadSignature",
    "UploadedMedia",
    "WebContext",
    # Helpers
    "check_blocklist",
    "escape_overlay_text",
    "is_valid_url",
    "safe_json_parse",
    "sign_params",
    "verify_webhook_signature",
]

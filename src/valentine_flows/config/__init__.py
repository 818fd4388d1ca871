"""Configuration package for valentine-flows.

Sub-modules:
    parsing    – Boolean/number/level parsing helpers
    providers  – Per-provider credential and endpoint dataclasses
    budgets    – FlowBudgets timeout budgets
    settings   – AppConfig dataclass, get_config/set_config globals
    loader     – AppConfig loading mixin (_AppConfigLoader)
"""

from valentine_flows.config.budgets import FlowBudgets
from valentine_flows.config.providers import (
    DEFAULT_FASTROUTER_API_URL,
    DEFAULT_FASTROUTER_MODEL,
    CloudinaryConfig,
    DeepgramConfig,
    ElevenLabsConfig,
    FastRouterConfig,
    FirecrawlConfig,
    OpenAIConfig,
    PerplexityConfig,
    VapiConfig,
)
from valentine_flows.config.settings import (
    AppConfig,
    get_config,
    provider_readiness,
    set_config,
)

__all__ = [
    "AppConfig",
    "CloudinaryConfig",
    "DEFAULT_FASTROUTER_API_URL",
    "DEFAULT_FASTROUTER_MODEL",
    "DeepgramConfig",
    "ElevenLabsConfig",
    "FastRouterConfig",
    "FirecrawlConfig",
    "FlowBudgets",
    "OpenAIConfig",
    "PerplexityConfig",
    "VapiConfig",
    "get_config",
    "provider_readiness",
    "set_config",
]

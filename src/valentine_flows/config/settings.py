"""AppConfig dataclass and global configuration state.

This module defines the ``AppConfig`` class (field declarations and simple
accessor methods) and the global ``get_config`` / ``set_config`` helpers.
Loading logic lives in the ``_AppConfigLoader`` mixin (``loader.py``)
which ``AppConfig`` inherits from.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from valentine_flows.config.budgets import FlowBudgets
from valentine_flows.config.loader import _AppConfigLoader
from valentine_flows.config.providers import (
    CloudinaryConfig,
    DeepgramConfig,
    ElevenLabsConfig,
    FastRouterConfig,
    FirecrawlConfig,
    OpenAIConfig,
    PerplexityConfig,
    VapiConfig,
)


@dataclass
class AppConfig(_AppConfigLoader):
    """Application configuration with support for env vars and TOML overrides."""

    # Logging configuration
    log_level: str = "INFO"
    structured_logging: bool = True

    # development | test | production
    environment: str = "development"

    # Providers
    perplexity: PerplexityConfig = field(default_factory=PerplexityConfig)
    firecrawl: FirecrawlConfig = field(default_factory=FirecrawlConfig)
    fastrouter: FastRouterConfig = field(default_factory=FastRouterConfig)
    elevenlabs: ElevenLabsConfig = field(default_factory=ElevenLabsConfig)
    cloudinary: CloudinaryConfig = field(default_factory=CloudinaryConfig)
    vapi: VapiConfig = field(default_factory=VapiConfig)
    openai: OpenAIConfig = field(default_factory=OpenAIConfig)
    deepgram: DeepgramConfig = field(default_factory=DeepgramConfig)

    flow_budgets: FlowBudgets = field(default_factory=FlowBudgets)

    startup_warnings: List[str] = field(default_factory=list, repr=False)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def _add_startup_warning(self, message: str) -> None:
        if message and message not in self.startup_warnings:
            self.startup_warnings.append(message)

    def validate_for_production(self) -> List[str]:
        """
        List settings that production requires but are missing.

        Webhook secrets are optional in development (unsigned webhooks are
        accepted) but mandatory in production.

        Returns:
            Names of the missing settings; empty outside production
        """
        if not self.is_production:
            return []
        missing = []
        if not self.vapi.webhook_secret:
            missing.append("VAPI_WEBHOOK_SECRET")
        if not self.cloudinary.webhook_secret:
            missing.append("CLOUDINARY_WEBHOOK_SECRET")
        return missing

    def setup_logging(self) -> None:
        """Configure logging based on settings."""
        level = getattr(logging, self.log_level, logging.INFO)

        if self.structured_logging:
            # JSON-style structured logging
            formatter = logging.Formatter(
                '{"timestamp":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}'
            )
        else:
            formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

        handler = logging.StreamHandler()
        handler.setFormatter(formatter)

        root_logger = logging.getLogger("valentine_flows")
        root_logger.setLevel(level)
        root_logger.addHandler(handler)


def provider_readiness(config: AppConfig) -> Dict[str, bool]:
    """Report which capabilities have the credentials they need."""
    return {
        "web_search": config.perplexity.is_configured,
        "link_enrichment": config.firecrawl.is_configured,
        "structured_generation": config.fastrouter.is_configured,
        "speech_synthesis": config.elevenlabs.is_configured and bool(config.elevenlabs.voice_id),
        "media_upload": config.cloudinary.is_configured,
        "telephony": config.vapi.is_configured,
        "content_moderation": config.openai.is_configured,
        "transcription": config.deepgram.is_configured,
    }


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def set_config(config: Optional[AppConfig]) -> None:
    """Set the global configuration instance (``None`` reloads on next access)."""
    global _config
    _config = config

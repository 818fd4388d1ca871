"""AppConfig loading logic.

Provides ``_AppConfigLoader``, a mixin whose methods are inherited by
``AppConfig`` (defined in ``settings.py``).
"""

from __future__ import annotations

import logging
import os
from dataclasses import fields, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, cast

if TYPE_CHECKING:
    from valentine_flows.config.settings import AppConfig

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # Python < 3.11 fallback

from valentine_flows.config.budgets import FlowBudgets
from valentine_flows.config.parsing import (
    _normalize_environment,
    _normalize_log_level,
    _parse_bool,
    _parse_float,
)

logger = logging.getLogger(__name__)

CONFIG_FILE_ENV_VAR = "VALENTINE_FLOWS_CONFIG_FILE"
PROJECT_CONFIG_NAME = "valentine-flows.toml"

PROVIDER_SECTIONS = (
    "perplexity",
    "firecrawl",
    "fastrouter",
    "elevenlabs",
    "cloudinary",
    "vapi",
    "openai",
    "deepgram",
)

# Environment variable -> (provider section, field)
_PROVIDER_ENV_VARS: Dict[str, tuple[str, str]] = {
    "PERPLEXITY_API_KEY": ("perplexity", "api_key"),
    "FIRECRAWL_API_KEY": ("firecrawl", "api_key"),
    "FASTROUTER_API_KEY": ("fastrouter", "api_key"),
    "FASTROUTER_API_URL": ("fastrouter", "api_url"),
    "FASTROUTER_MODEL": ("fastrouter", "model"),
    "ELEVENLABS_API_KEY": ("elevenlabs", "api_key"),
    "ELEVENLABS_VOICE_ID": ("elevenlabs", "voice_id"),
    "CLOUDINARY_CLOUD_NAME": ("cloudinary", "cloud_name"),
    "CLOUDINARY_API_KEY": ("cloudinary", "api_key"),
    "CLOUDINARY_API_SECRET": ("cloudinary", "api_secret"),
    "CLOUDINARY_WEBHOOK_SECRET": ("cloudinary", "webhook_secret"),
    "VAPI_API_KEY": ("vapi", "api_key"),
    "VAPI_WEBHOOK_SECRET": ("vapi", "webhook_secret"),
    "OPENAI_API_KEY": ("openai", "api_key"),
    "DEEPGRAM_API_KEY": ("deepgram", "api_key"),
}


def _merge_dataclass(current: Any, table: Dict[str, Any], *, source: str) -> Any:
    """Return *current* with the known keys of *table* applied."""
    known = {f.name for f in fields(current)}
    unknown = sorted(set(table) - known)
    if unknown:
        logger.warning("Ignoring unknown keys in %s: %s", source, ", ".join(unknown))
    return replace(current, **{key: value for key, value in table.items() if key in known})


class _AppConfigLoader:
    """Mixin providing config-loading methods for ``AppConfig``.

    At runtime ``self`` is always an ``AppConfig`` instance.
    """

    if TYPE_CHECKING:
        log_level: str
        structured_logging: bool
        environment: str
        flow_budgets: FlowBudgets
        startup_warnings: List[str]

        def _add_startup_warning(self, message: str) -> None: ...

        def validate_for_production(self) -> List[str]: ...

    @classmethod
    def from_env(cls, config_file: Optional[str] = None) -> "AppConfig":
        """
        Create configuration from environment variables and optional TOML file.

        Priority (highest to lowest):
        1. Environment variables
        2. Explicit TOML file (argument or VALENTINE_FLOWS_CONFIG_FILE)
        3. Project TOML config (./valentine-flows.toml)
        4. XDG config (~/.config/valentine-flows/config.toml)
        5. Default values
        """
        config = cls()

        toml_path = config_file or os.environ.get(CONFIG_FILE_ENV_VAR)
        if toml_path:
            config._load_toml(Path(toml_path))
        else:
            xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
            xdg_config = Path(xdg_config_home) / "valentine-flows" / "config.toml"
            if xdg_config.exists():
                config._load_toml(xdg_config)
                logger.debug("Loaded XDG config from %s", xdg_config)

            project_config = Path(PROJECT_CONFIG_NAME)
            if project_config.exists():
                config._load_toml(project_config)
                logger.debug("Loaded project config from %s", project_config)

        config._load_env()
        config._validate_startup_configuration()
        return cast("AppConfig", config)

    def _load_toml(self, path: Path) -> None:
        """Load configuration from TOML file."""
        if not path.exists():
            logger.warning("Config file not found: %s", path)
            return

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.error("Error loading config file %s: %s", path, e)
            return

        if "logging" in data:
            log = data["logging"]
            if "level" in log:
                self.log_level = _normalize_log_level(log["level"])
            if "structured" in log:
                self.structured_logging = _parse_bool(log["structured"])

        if "app" in data and "environment" in data["app"]:
            self.environment = _normalize_environment(data["app"]["environment"])

        providers = data.get("providers", {})
        for section in PROVIDER_SECTIONS:
            table = providers.get(section)
            if table is None:
                continue
            if not isinstance(table, dict):
                self._add_startup_warning(
                    f"Ignoring [providers.{section}] in {path}: expected table, got {type(table).__name__}"
                )
                continue
            merged = _merge_dataclass(getattr(self, section), table, source=f"{path}: [providers.{section}]")
            setattr(self, section, merged)

        if "budgets" in data:
            try:
                self.flow_budgets = _merge_dataclass(
                    self.flow_budgets, data["budgets"], source=f"{path}: [budgets]"
                )
            except (TypeError, ValueError) as e:
                self._add_startup_warning(f"Ignoring [budgets] in {path}: {e}")

    def _load_env(self) -> None:
        """Apply environment variable overrides."""
        if level := os.environ.get("VALENTINE_FLOWS_LOG_LEVEL"):
            self.log_level = _normalize_log_level(level)

        if structured := os.environ.get("VALENTINE_FLOWS_STRUCTURED_LOGGING"):
            self.structured_logging = _parse_bool(structured)

        if environment := os.environ.get("VALENTINE_FLOWS_ENV"):
            self.environment = _normalize_environment(environment)

        overrides: Dict[str, Dict[str, str]] = {}
        for env_var, (section, field_name) in _PROVIDER_ENV_VARS.items():
            value = os.environ.get(env_var)
            if value:
                overrides.setdefault(section, {})[field_name] = value
        for section, values in overrides.items():
            setattr(self, section, replace(getattr(self, section), **values))

        if flow_timeout := os.environ.get("VALENTINE_FLOWS_FLOW_TIMEOUT"):
            parsed = _parse_float(flow_timeout, name="VALENTINE_FLOWS_FLOW_TIMEOUT")
            if parsed is not None:
                self.flow_budgets = replace(self.flow_budgets, flow_timeout=parsed)

        if cancel := os.environ.get("VALENTINE_FLOWS_CANCEL_ON_TIMEOUT"):
            self.flow_budgets = replace(self.flow_budgets, cancel_on_timeout=_parse_bool(cancel))

    def _validate_startup_configuration(self) -> None:
        for missing in self.validate_for_production():
            self._add_startup_warning(f"Production setting missing: {missing}")
        for warning in self.startup_warnings:
            logger.warning(warning)

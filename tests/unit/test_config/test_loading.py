"""Tests for layered AppConfig loading (XDG -> project -> explicit file -> env)."""

import logging

import pytest

from valentine_flows.config import AppConfig, FlowBudgets, get_config, provider_readiness, set_config


class TestDefaults:
    def test_defaults_without_any_source(self, isolated_dirs):
        config = AppConfig.from_env()

        assert config.log_level == "INFO"
        assert config.structured_logging is True
        assert config.environment == "development"
        assert config.flow_budgets == FlowBudgets()
        assert config.perplexity.api_key is None
        assert config.fastrouter.model == "openai/gpt-5.2"
        assert config.startup_warnings == []

    def test_nothing_is_ready_by_default(self, isolated_dirs):
        readiness = provider_readiness(AppConfig.from_env())
        assert set(readiness) == {
            "web_search",
            "link_enrichment",
            "structured_generation",
            "speech_synthesis",
            "media_upload",
            "telephony",
            "content_moderation",
            "transcription",
        }
        assert not any(readiness.values())


class TestTomlLayers:
    def test_xdg_then_project(self, isolated_dirs):
        project, xdg_file = isolated_dirs
        xdg_file.write_text(
            """
[logging]
level = "DEBUG"
structured = false

[providers.perplexity]
api_key = "pplx-xdg"
model = "sonar-pro"
"""
        )
        (project / "valentine-flows.toml").write_text(
            """
[logging]
level = "WARNING"

[providers.perplexity]
api_key = "pplx-project"
"""
        )

        config = AppConfig.from_env()

        assert config.log_level == "WARNING"
        assert config.structured_logging is False
        assert config.perplexity.api_key == "pplx-project"
        assert config.perplexity.model == "sonar-pro"

    def test_explicit_file_skips_discovery(self, isolated_dirs, tmp_path):
        project, _ = isolated_dirs
        (project / "valentine-flows.toml").write_text('[logging]\nlevel = "ERROR"\n')
        explicit = tmp_path / "explicit.toml"
        explicit.write_text('[app]\nenvironment = "test"\n')

        config = AppConfig.from_env(str(explicit))

        assert config.environment == "test"
        assert config.log_level == "INFO"

    def test_config_file_env_var(self, isolated_dirs, tmp_path, monkeypatch):
        explicit = tmp_path / "from-env.toml"
        explicit.write_text("[budgets]\nflow_timeout = 10.0\nprovider_retries = 1\n")
        monkeypatch.setenv("VALENTINE_FLOWS_CONFIG_FILE", str(explicit))

        config = AppConfig.from_env()

        assert config.flow_budgets.flow_timeout == 10.0
        assert config.flow_budgets.provider_retries == 1
        assert config.flow_budgets.search_timeout == 4.0

    def test_unknown_provider_keys_are_ignored(self, isolated_dirs, caplog):
        project, _ = isolated_dirs
        (project / "valentine-flows.toml").write_text(
            '[providers.firecrawl]\napi_key = "fc"\nunknown_knob = 1\n'
        )

        with caplog.at_level(logging.WARNING, logger="valentine_flows.config.loader"):
            config = AppConfig.from_env()

        assert config.firecrawl.api_key == "fc"
        assert "unknown_knob" in caplog.text

    def test_invalid_budgets_become_startup_warning(self, isolated_dirs):
        project, _ = isolated_dirs
        (project / "valentine-flows.toml").write_text("[budgets]\nflow_timeout = -1\n")

        config = AppConfig.from_env()

        assert config.flow_budgets == FlowBudgets()
        assert any("[budgets]" in warning for warning in config.startup_warnings)

    def test_missing_explicit_file_keeps_defaults(self, isolated_dirs, tmp_path):
        config = AppConfig.from_env(str(tmp_path / "nope.toml"))
        assert config.log_level == "INFO"

    def test_malformed_toml_keeps_defaults(self, isolated_dirs):
        project, _ = isolated_dirs
        (project / "valentine-flows.toml").write_text("[logging\nlevel=")
        assert AppConfig.from_env().log_level == "INFO"


class TestEnvOverrides:
    def test_env_overrides_toml(self, isolated_dirs, monkeypatch):
        project, _ = isolated_dirs
        (project / "valentine-flows.toml").write_text(
            '[logging]\nlevel = "ERROR"\n\n[providers.fastrouter]\nmodel = "toml-model"\n'
        )
        monkeypatch.setenv("VALENTINE_FLOWS_LOG_LEVEL", "debug")
        monkeypatch.setenv("FASTROUTER_MODEL", "env-model")
        monkeypatch.setenv("FASTROUTER_API_KEY", "fr-env")

        config = AppConfig.from_env()

        assert config.log_level == "DEBUG"
        assert config.fastrouter.model == "env-model"
        assert config.fastrouter.api_key == "fr-env"

    def test_provider_credentials(self, isolated_dirs, monkeypatch):
        for name, value in {
            "PERPLEXITY_API_KEY": "p",
            "FIRECRAWL_API_KEY": "f",
            "FASTROUTER_API_KEY": "r",
            "ELEVENLABS_API_KEY": "e",
            "ELEVENLABS_VOICE_ID": "voice",
            "CLOUDINARY_CLOUD_NAME": "demo",
            "CLOUDINARY_API_KEY": "ck",
            "CLOUDINARY_API_SECRET": "cs",
            "VAPI_API_KEY": "v",
            "OPENAI_API_KEY": "o",
            "DEEPGRAM_API_KEY": "d",
        }.items():
            monkeypatch.setenv(name, value)

        readiness = provider_readiness(AppConfig.from_env())

        assert all(readiness.values())

    def test_speech_needs_voice_id(self, isolated_dirs, monkeypatch):
        monkeypatch.setenv("ELEVENLABS_API_KEY", "e")
        assert provider_readiness(AppConfig.from_env())["speech_synthesis"] is False

    def test_budget_env_vars(self, isolated_dirs, monkeypatch):
        monkeypatch.setenv("VALENTINE_FLOWS_FLOW_TIMEOUT", "9.5")
        monkeypatch.setenv("VALENTINE_FLOWS_CANCEL_ON_TIMEOUT", "yes")

        budgets = AppConfig.from_env().flow_budgets

        assert budgets.flow_timeout == 9.5
        assert budgets.cancel_on_timeout is True

    def test_invalid_numbers_are_ignored(self, isolated_dirs, monkeypatch):
        monkeypatch.setenv("VALENTINE_FLOWS_FLOW_TIMEOUT", "soon")
        assert AppConfig.from_env().flow_budgets.flow_timeout == 8.0

    @pytest.mark.parametrize("value,expected", [("PRODUCTION", "production"), ("staging", "development")])
    def test_environment_normalized(self, isolated_dirs, monkeypatch, value, expected):
        monkeypatch.setenv("VALENTINE_FLOWS_ENV", value)
        assert AppConfig.from_env().environment == expected


class TestProductionValidation:
    def test_missing_webhook_secrets_reported(self, isolated_dirs, monkeypatch):
        monkeypatch.setenv("VALENTINE_FLOWS_ENV", "production")
        monkeypatch.setenv("VAPI_WEBHOOK_SECRET", "vh")

        config = AppConfig.from_env()

        assert config.validate_for_production() == ["CLOUDINARY_WEBHOOK_SECRET"]
        assert config.startup_warnings == ["Production setting missing: CLOUDINARY_WEBHOOK_SECRET"]

    def test_development_never_reports(self):
        assert AppConfig().validate_for_production() == []


class TestGlobalConfig:
    def test_get_config_is_cached(self, isolated_dirs):
        assert get_config() is get_config()

    def test_set_config(self):
        custom = AppConfig(environment="test")
        set_config(custom)
        assert get_config() is custom


class TestSetupLogging:
    def test_installs_handler_on_package_logger(self):
        logger = logging.getLogger("valentine_flows")
        before = list(logger.handlers)
        try:
            AppConfig(log_level="DEBUG", structured_logging=False).setup_logging()
            assert logger.level == logging.DEBUG
            assert len(logger.handlers) == len(before) + 1
        finally:
            for handler in logger.handlers[len(before):]:
                logger.removeHandler(handler)
            logger.setLevel(logging.NOTSET)

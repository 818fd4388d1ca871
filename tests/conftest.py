"""Shared fixtures for valentine-flows tests."""

import pytest

from valentine_flows.config import set_config
from valentine_flows.core.resilience import ResilienceRegistry


class FakeClock:
    """Manually advanced clock for breaker and timestamp tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry(clock):
    """Fresh breaker registry driven by the fake clock."""
    return ResilienceRegistry(clock=clock)


@pytest.fixture(autouse=True)
def _reset_global_config(monkeypatch):
    """Keep the global config and provider env vars out of every test."""
    for name in (
        "VALENTINE_FLOWS_CONFIG_FILE",
        "VALENTINE_FLOWS_ENV",
        "VALENTINE_FLOWS_LOG_LEVEL",
        "VALENTINE_FLOWS_STRUCTURED_LOGGING",
        "VALENTINE_FLOWS_FLOW_TIMEOUT",
        "VALENTINE_FLOWS_CANCEL_ON_TIMEOUT",
        "PERPLEXITY_API_KEY",
        "FIRECRAWL_API_KEY",
        "FASTROUTER_API_KEY",
        "FASTROUTER_API_URL",
        "FASTROUTER_MODEL",
        "ELEVENLABS_API_KEY",
        "ELEVENLABS_VOICE_ID",
        "CLOUDINARY_CLOUD_NAME",
        "CLOUDINARY_API_KEY",
        "CLOUDINARY_API_SECRET",
        "CLOUDINARY_WEBHOOK_SECRET",
        "VAPI_API_KEY",
        "VAPI_WEBHOOK_SECRET",
        "OPENAI_API_KEY",
        "DEEPGRAM_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    set_config(None)
    yield
    set_config(None)

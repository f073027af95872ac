"""
Module: conftest.py
Description: Shared pytest fixtures for ezhook tests.

Provides the webhook URL, a recording replacement for the backoff
sleep so retry tests run instantly, engine factories and sample
payloads. HTTP traffic is mocked with pytest-httpx (httpx_mock) or
httpx.MockTransport.
"""

import pytest
from pydantic import Field
from pydantic_settings import SettingsConfigDict

from ezhook.config.settings import Settings
from ezhook.delivery.engine import DeliveryEngine
from ezhook.models.embed import Embed

WEBHOOK_URL = "https://discord.com/api/webhooks/123456789/test-webhook-token"


class TestSettings(Settings):
    """Test settings that don't read .env files, with fast retry defaults."""

    __test__ = False

    model_config = SettingsConfigDict(env_file=None)

    log_level: str = Field(default="DEBUG")
    max_retries: int = Field(default=2)
    base_delay_ms: float = Field(default=10)
    max_delay_ms: float = Field(default=100)


class SleepRecorder:
    """Stands in for asyncio.sleep and records every requested delay."""

    def __init__(self):
        self.delays = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def test_settings():
    return TestSettings()


@pytest.fixture
def webhook_url():
    return WEBHOOK_URL


@pytest.fixture
def sleep_recorder():
    """Provide a fake sleep that records backoff delays in seconds."""
    return SleepRecorder()


@pytest.fixture
def no_jitter():
    """Uniform source that always returns the midpoint, removing jitter."""
    return lambda low, high: 0.0


@pytest.fixture
def make_engine(sleep_recorder, no_jitter):
    """
    Provide a factory for DeliveryEngine instances wired to the
    recording sleep and a jitter-free random source.
    """
    def _make(retry_policy=None, **kwargs):
        kwargs.setdefault("sleep", sleep_recorder)
        kwargs.setdefault("rng", no_jitter)
        return DeliveryEngine(WEBHOOK_URL, retry_policy, **kwargs)

    return _make


@pytest.fixture
def sample_embed():
    """Provide a populated embed."""
    return (
        Embed()
        .set_title("Deploy finished")
        .set_description("api v2.3.1 is live")
        .set_color("#00ff00")
        .set_author("CI", url="https://ci.example.com")
        .add_field("Service", "api", inline=True)
        .add_field("Duration", "42s", inline=True)
    )

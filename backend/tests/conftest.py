"""
AI Gateway — Test Configuration (conftest.py)
==============================================

What:  Shared pytest fixtures for the gateway test suite.
Why:   Tests must never touch the real Gemini API or wait on real cooldowns.
How:   Environment is overridden before any ai_gateway import; the clock,
       the sleep function and the provider client are all injected fakes.

Fixtures:
    ├── clock:           Manually advanced monotonic clock
    ├── fake_sleep:      AsyncMock standing in for asyncio.sleep
    ├── make_pool:       Builds a CredentialPool of N fake keys
    ├── make_orchestrator: Builds a FailoverOrchestrator over N keys
    └── fast_binding / deep_binding: Tier bindings for test calls
"""

import os

# Override settings for testing BEFORE any app imports
os.environ["GEMINI_API_KEY"] = "test-key-not-real"
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402

from ai_gateway.config import Settings  # noqa: E402
from ai_gateway.services.credentials import CredentialPool  # noqa: E402
from ai_gateway.services.failover import FailoverOrchestrator  # noqa: E402
from ai_gateway.services.rotation import RotationState  # noqa: E402
from ai_gateway.services.tiers import ModelTier, TIER_PARAMS, TierBinding  # noqa: E402


class FakeClock:
    """Monotonic clock that only moves when a test says so."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAPIError(Exception):
    """Mimics the attributes google.genai APIError exposes."""

    def __init__(self, code: int, message: str, status: str = ""):
        super().__init__(f"{code} {status}. {message}")
        self.code = code
        self.message = message
        self.status = status


@pytest.fixture
def quota_error():
    """Factory for a 429 RESOURCE_EXHAUSTED error."""
    return lambda: FakeAPIError(429, "Resource has been exhausted (e.g. check quota).", "RESOURCE_EXHAUSTED")


@pytest.fixture
def fatal_error():
    """Factory for a 400 INVALID_ARGUMENT error."""
    return lambda: FakeAPIError(400, "Request contains an invalid argument.", "INVALID_ARGUMENT")


@pytest.fixture
def test_settings():
    """Settings built explicitly so tests do not depend on a developer's .env."""
    return Settings(
        gemini_api_key="test-key-not-real",
        gemini_fast_model="fast-model",
        gemini_deep_model="deep-model",
        failover_reset_window=300.0,
        failover_cooldown=3.0,
        _env_file=None,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_sleep():
    return AsyncMock(return_value=None)


@pytest.fixture
def make_pool():
    def _make(size: int) -> CredentialPool:
        return CredentialPool([f"key-{chr(ord('A') + i)}" for i in range(size)])
    return _make


@pytest.fixture
def client_factory():
    """Returns a distinct fake client per credential."""
    return MagicMock(side_effect=lambda credential: MagicMock(name=f"client-{credential.index}"))


@pytest.fixture
def make_orchestrator(make_pool, clock, fake_sleep, client_factory):
    def _make(size: int, cooldown: float = 3.0, reset_window: float = 300.0) -> FailoverOrchestrator:
        pool = make_pool(size)
        state = RotationState(pool.size, reset_window=reset_window, clock=clock)
        return FailoverOrchestrator(
            pool, state, client_factory, cooldown=cooldown, sleep=fake_sleep
        )
    return _make


@pytest.fixture
def fast_binding():
    return TierBinding(ModelTier.FAST, "fast-model", TIER_PARAMS[ModelTier.FAST])


@pytest.fixture
def deep_binding():
    return TierBinding(ModelTier.DEEP, "deep-model", TIER_PARAMS[ModelTier.DEEP])

"""Root pytest fixtures for openai-service tests."""

from __future__ import annotations

import pytest

from openai_service.config import PollConfig, ServiceConfig


@pytest.fixture
def sleeps() -> list[float]:
    """Delays requested from the fake sleep, in call order."""
    return []


@pytest.fixture
def fake_sleep(sleeps: list[float]):
    """Sleep coroutine that records the delay and returns immediately."""

    async def _sleep(delay: float) -> None:
        sleeps.append(delay)

    return _sleep


@pytest.fixture
def service_config() -> ServiceConfig:
    """Configuration with test keys, zero backoff and a short poll ceiling."""
    return ServiceConfig(
        completions_api_key="sk-test-completions",
        assistants_api_key="sk-test-assistants",
        retries=3,
        timeout=5.0,
        transport_backoff=0.0,
        poll=PollConfig(interval=0.0, max_attempts=10),
    )

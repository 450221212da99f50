"""Shared test fixtures for all test groups."""

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from appbuilder.core.config import Settings
from appbuilder.llm.adapter import LLMResponse
from appbuilder.queue.schemas import GeneratedFile


class FakeClock:
    """Injectable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 3, 2, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeAdapter:
    """Scriptable LLMAdapter test double.

    - available: what is_available() returns
    - error: raised from generate_code() when set
    - gate: asyncio.Event generate_code() waits on before returning
    """

    provider_id = "fake"

    def __init__(self):
        self.available = True
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None
        self.files = [
            GeneratedFile(path="src/App.tsx", content="line one\nline two", language="tsx"),
        ]
        self.calls: list[tuple[str, str]] = []

    async def is_available(self) -> bool:
        return self.available

    async def generate_code(self, prompt: str, target: str) -> LLMResponse:
        self.calls.append((prompt, target))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return LLMResponse(files=list(self.files))


@pytest.fixture
def clock():
    """Frozen clock at 2026-03-02 12:00 UTC."""
    return FakeClock()


@pytest.fixture
def fake_adapter():
    """Fresh FakeAdapter that succeeds with one tsx file."""
    return FakeAdapter()


@pytest.fixture
def fast_settings():
    """Settings with short intervals so queue tests finish quickly."""
    return Settings(
        _env_file=None,
        anthropic_api_key="",
        job_wait_timeout=2.0,
        job_poll_interval=0.01,
        worker_idle_interval=0.01,
    )

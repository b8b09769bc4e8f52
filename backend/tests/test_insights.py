from __future__ import annotations

import asyncio

import pytest

from app.core.config import Settings
from app.schemas import InsightsRequest
from app.services import insights as insights_module
from app.services.insights import (
    GeminiInsightsProvider,
    InsightsUnavailable,
    build_prompt,
    generate_insights,
    provider_from_settings,
)


class _SlowProvider:
    name = "slow"

    def __init__(self) -> None:
        self.cancelled = False

    async def generate(self, prompt: str) -> str:
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return "late"


class _EchoProvider:
    name = "echo"

    async def generate(self, prompt: str) -> str:
        return prompt.splitlines()[-1]


def test_build_prompt_includes_aggregates_and_text():
    prompt = build_prompt(InsightsRequest(aggregates={"b": 1, "a": 2}, text=" page text "))

    assert prompt.startswith(insights_module.INSIGHTS_INSTRUCTIONS)
    assert prompt.index('"a": 2') < prompt.index('"b": 1')
    assert prompt.endswith("Page text:\npage text")


def test_build_prompt_requires_content():
    with pytest.raises(ValueError):
        build_prompt(InsightsRequest())


def test_generate_insights_returns_provider_answer():
    answer = asyncio.run(
        generate_insights(_EchoProvider(), InsightsRequest(text="solid"), timeout=1)
    )
    assert answer == "solid"


def test_generate_insights_cancels_task_on_timeout():
    provider = _SlowProvider()

    async def scenario() -> None:
        with pytest.raises(InsightsUnavailable, match="exceeded"):
            await generate_insights(provider, InsightsRequest(text="x"), timeout=0.01)
        await asyncio.sleep(0)

    asyncio.run(scenario())
    assert provider.cancelled


def test_generate_insights_cancels_task_when_request_is_cancelled():
    provider = _SlowProvider()

    async def scenario() -> None:
        request_task = asyncio.create_task(
            generate_insights(provider, InsightsRequest(text="x"), timeout=30)
        )
        await asyncio.sleep(0.01)
        request_task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await request_task
        await asyncio.sleep(0)

    asyncio.run(scenario())
    assert provider.cancelled


def test_provider_from_settings():
    provider = provider_from_settings(Settings(gemini_api_key=" key ", insights_model="gemini-x"))
    assert isinstance(provider, GeminiInsightsProvider)
    assert provider.api_key == "key"
    assert provider.model == "gemini-x"

    with pytest.raises(InsightsUnavailable, match="Missing GEMINI_API_KEY"):
        provider_from_settings(Settings(gemini_api_key=""))


class _FakeResponse:
    def __init__(self, text: str | None = None, blocked: bool = False) -> None:
        self._text = text
        self._blocked = blocked

    @property
    def text(self) -> str | None:
        if self._blocked:
            raise ValueError("response was blocked")
        return self._text


class _FakeGenAI:
    def __init__(self, response: _FakeResponse) -> None:
        self.response = response
        self.configured: list[str] = []
        self.models: list[str] = []

    def configure(self, *, api_key: str) -> None:
        self.configured.append(api_key)

    def GenerativeModel(self, name: str):  # noqa: N802 - mirrors the SDK attribute
        self.models.append(name)
        response = self.response

        class _Model:
            async def generate_content_async(self, prompt: str) -> _FakeResponse:
                return response

        return _Model()


def test_gemini_provider_returns_stripped_text(monkeypatch):
    fake = _FakeGenAI(_FakeResponse(text="  Keep solving.  \n"))
    monkeypatch.setattr(insights_module, "genai", fake)

    provider = GeminiInsightsProvider(api_key="k", model="gemini-2.5-flash")
    assert asyncio.run(provider.generate("prompt")) == "Keep solving."
    assert fake.configured == ["k"]
    assert fake.models == ["gemini-2.5-flash"]


@pytest.mark.parametrize("response", [_FakeResponse(blocked=True), _FakeResponse(text="   ")])
def test_gemini_provider_rejects_empty_or_blocked_answers(monkeypatch, response):
    monkeypatch.setattr(insights_module, "genai", _FakeGenAI(response))

    with pytest.raises(InsightsUnavailable):
        asyncio.run(GeminiInsightsProvider(api_key="k").generate("prompt"))

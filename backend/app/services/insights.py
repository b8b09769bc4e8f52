"""Natural-language profile insights delegated to Google Gemini."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Protocol

import google.generativeai as genai
from loguru import logger

from app.core.config import Settings
from app.schemas import InsightsRequest

INSIGHTS_INSTRUCTIONS = (
    "Analyze the following Codeforces analytics for a competitive programmer and "
    "provide insights about their profile. Focus on strengths, weaknesses, and "
    "improvement areas. Keep it concise and expert-like."
)


class InsightsUnavailable(RuntimeError):
    """The insights collaborator could not produce a summary."""


class InsightsProvider(Protocol):
    name: str

    async def generate(self, prompt: str) -> str:
        """Return the model's text answer for ``prompt``."""


@dataclass(slots=True)
class GeminiInsightsProvider:
    api_key: str
    model: str = "gemini-2.5-flash"
    name: str = "gemini"

    async def generate(self, prompt: str) -> str:
        genai.configure(api_key=self.api_key)
        model = genai.GenerativeModel(self.model)
        response = await model.generate_content_async(prompt)
        try:
            text = response.text
        except ValueError as exc:
            # Raised by the SDK when the candidate was blocked or has no text part.
            raise InsightsUnavailable(f"Gemini returned no text: {exc}") from exc
        if not text or not text.strip():
            raise InsightsUnavailable("Gemini returned an empty response")
        return text.strip()


def provider_from_settings(settings: Settings) -> InsightsProvider:
    api_key = (settings.gemini_api_key or "").strip()
    if not api_key:
        raise InsightsUnavailable("Missing GEMINI_API_KEY")
    return GeminiInsightsProvider(api_key=api_key, model=settings.insights_model)


def build_prompt(request: InsightsRequest) -> str:
    sections: list[str] = [INSIGHTS_INSTRUCTIONS]
    if request.aggregates:
        sections.append("Aggregates (JSON):\n" + json.dumps(request.aggregates, indent=2, sort_keys=True))
    if request.text and request.text.strip():
        sections.append("Page text:\n" + request.text.strip())
    if len(sections) == 1:
        raise ValueError("Insights need aggregates or text to analyze")
    return "\n\n".join(sections)


async def generate_insights(
    provider: InsightsProvider,
    request: InsightsRequest,
    *,
    timeout: float,
) -> str:
    """Run the provider call as a task bounded by the caller.

    The task is cancelled when the timeout expires or when the awaiting
    request is itself cancelled, so no generation outlives its request.
    """

    prompt = build_prompt(request)
    task = asyncio.create_task(provider.generate(prompt), name=f"insights-{provider.name}")
    try:
        done, _ = await asyncio.wait({task}, timeout=timeout)
        if not done:
            raise InsightsUnavailable(f"Insights generation exceeded {timeout:.0f}s")
        return task.result()
    finally:
        if not task.done():
            task.cancel()
            logger.info("Cancelled unfinished {} insights task", provider.name)


__all__ = [
    "GeminiInsightsProvider",
    "InsightsProvider",
    "InsightsUnavailable",
    "build_prompt",
    "generate_insights",
    "provider_from_settings",
]

from __future__ import annotations

import asyncio
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import pytest

from app.core.config import Settings

NOW = datetime(2024, 3, 14, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced monotonic clock whose sleep only moves time forward."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)


def envelope(result: Any) -> dict[str, Any]:
    return {"status": "OK", "result": result}


def raw_submission(
    *,
    created: datetime | int,
    verdict: str | None = "OK",
    contest_id: int | None = 1,
    index: str = "A",
    rating: int | None = 800,
    language: str | None = "GNU C++17",
    tags: list[str] | None = None,
    submission_id: int = 1,
) -> dict[str, Any]:
    seconds = int(created.timestamp()) if isinstance(created, datetime) else created
    payload: dict[str, Any] = {
        "id": submission_id,
        "contestId": contest_id,
        "creationTimeSeconds": seconds,
        "problem": {
            "contestId": contest_id,
            "index": index,
            "name": f"Problem {index}",
            "tags": tags or [],
        },
    }
    if rating is not None:
        payload["problem"]["rating"] = rating
    if verdict is not None:
        payload["verdict"] = verdict
    if language is not None:
        payload["programmingLanguage"] = language
    return payload


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def sample_user_payload() -> dict[str, Any]:
    return {
        "handle": "tourist",
        "rank": "legendary grandmaster",
        "rating": 3500,
        "maxRating": 3979,
        "maxRank": "tourist",
        "contribution": 120,
        "friendOfCount": 70000,
        "registrationTimeSeconds": 1265987288,
    }


@pytest.fixture
def sample_rating_payload() -> list[dict[str, Any]]:
    return [
        {
            "contestId": 1,
            "contestName": "Codeforces Beta Round #1",
            "handle": "tourist",
            "rank": 12,
            "ratingUpdateTimeSeconds": 1266588000,
            "oldRating": 1500,
            "newRating": 1520,
        },
        {
            "contestId": 2,
            "contestName": "Codeforces Beta Round #2",
            "handle": "tourist",
            "rank": 3,
            "ratingUpdateTimeSeconds": 1267124400,
            "oldRating": 1520,
            "newRating": 1515,
        },
        {
            "contestId": 3,
            "contestName": "Codeforces Beta Round #3",
            "handle": "tourist",
            "rank": 50,
            "ratingUpdateTimeSeconds": 1267970400,
            "oldRating": 1515,
            "newRating": 1525,
        },
    ]


@pytest.fixture
def test_settings(monkeypatch) -> Settings:
    settings = Settings(
        cf_key="test-key",
        cf_secret="test-secret",
        cf_min_interval_seconds=0,
        cf_response_cache_seconds=0,
        gemini_api_key="test-gemini",
    )
    monkeypatch.setattr("app.core.config.get_settings", lambda: settings)
    monkeypatch.setattr("app.core.config.settings", settings)
    return settings

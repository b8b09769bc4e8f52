"""Fetch Codeforces data for a handle and run it through the aggregators."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Callable

from analytics import (
    ScoringFormulas,
    summarize_activity,
    summarize_consistency,
    summarize_difficulty,
    summarize_profile,
    summarize_ratings,
    summarize_submissions,
    tag_distribution,
    trailing_heatmap,
    upcoming_contests,
    weekly_counts,
)
from app.core.config import Settings
from app.domain import UserRecord
from app.schemas import (
    Activity,
    AnalyticsReport,
    Badge,
    ConsistencySummary,
    ContestEntry,
    HeatmapDay,
    ProblemDifficulty,
    ProfileAggregate,
    RatingHistory,
    SubmissionStats,
)
from codeforces import CodeforcesClient, ValidationError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AnalyticsService:
    """Per-request analytics over live Codeforces data; nothing is persisted."""

    def __init__(
        self,
        client: CodeforcesClient,
        *,
        settings: Settings,
        formulas: ScoringFormulas | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._client = client
        self._settings = settings
        self._formulas = formulas or ScoringFormulas.from_settings(settings)
        self._clock = clock

    async def _user(self, handle: str) -> UserRecord:
        users = await self._client.user_info(handle)
        if not users:
            raise ValidationError(f"user.info returned no record for handle '{handle}'")
        return users[0]

    async def profile(self, handle: str) -> ProfileAggregate:
        return summarize_profile(await self._user(handle), self._formulas)

    async def upcoming_contests(self) -> list[ContestEntry]:
        contests = await self._client.contest_list(gym=False)
        return upcoming_contests(
            contests,
            now=self._clock().timestamp(),
            limit=self._settings.upcoming_contest_limit,
        )

    async def ratings(self, handle: str) -> RatingHistory:
        return summarize_ratings(await self._client.user_rating(handle))

    async def submissions(self, handle: str) -> SubmissionStats:
        return summarize_submissions(await self._client.user_status(handle))

    async def difficulty(self, handle: str) -> ProblemDifficulty:
        return summarize_difficulty(await self._client.user_status(handle))

    async def activity(self, handle: str) -> Activity:
        return summarize_activity(await self._client.user_status(handle), now=self._clock())

    async def heatmap(self, handle: str, *, days: int | None = None) -> list[HeatmapDay]:
        now = self._clock()
        activity = summarize_activity(await self._client.user_status(handle), now=now)
        return trailing_heatmap(
            activity.heatmap,
            today=now.date(),
            days=days or self._settings.heatmap_window_days,
        )

    async def consistency(self, handle: str) -> ConsistencySummary:
        counts = weekly_counts(
            await self._client.user_status(handle),
            now=self._clock(),
            weeks=self._settings.consistency_window_weeks,
        )
        return summarize_consistency(counts)

    async def badges(self, handle: str) -> list[Badge]:
        return (await self.report(handle)).badges

    async def report(self, handle: str) -> AnalyticsReport:
        """Everything for one handle, fetching each upstream resource once."""

        user, changes, submissions = await asyncio.gather(
            self._user(handle),
            self._client.user_rating(handle),
            self._client.user_status(handle),
        )
        now = self._clock()

        profile = summarize_profile(user, self._formulas)
        ratings = summarize_ratings(changes)
        stats = summarize_submissions(submissions)
        difficulty = summarize_difficulty(submissions)
        consistency = summarize_consistency(
            weekly_counts(submissions, now=now, weeks=self._settings.consistency_window_weeks)
        )
        badges = self._formulas.badges(
            current_rating=profile.current_rating,
            contribution=profile.contribution,
            ratings=ratings.summary,
            submissions=stats,
            difficulty=difficulty,
        )
        return AnalyticsReport(
            profile=profile,
            ratings=ratings,
            submissions=stats,
            difficulty=difficulty,
            activity=summarize_activity(submissions, now=now),
            consistency=consistency,
            badges=badges,
            tags=tag_distribution(submissions),
        )


__all__ = ["AnalyticsService"]

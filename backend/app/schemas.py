from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serialized with camelCase keys, the shape the dashboard reads."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProfileAggregate(CamelModel):
    handle: str
    title: str | None = None
    current_rating: int | None = None
    max_rating: int | None = None
    max_rank: str | None = None
    contribution: int = 0
    registration_time: int | None = None
    custom_score: int = 0


class ContestEntry(CamelModel):
    name: str
    division: str | None = None
    start_time_seconds: int
    duration_seconds: int | None = None


class RatingEntry(CamelModel):
    contest_name: str
    contest_id: int | None = None
    rating_update_time_seconds: int | None = None
    rank: int | None = None
    old_rating: int | None = None
    new_rating: int | None = None


class RatingSummary(CamelModel):
    total: int = 0
    best_rank: int | None = None
    avg_delta: int | None = None


class RatingHistory(CamelModel):
    summary: RatingSummary
    entries: list[RatingEntry] = Field(default_factory=list)


class SubmissionStats(CamelModel):
    total: int = 0
    verdict_counts: dict[str, int] = Field(default_factory=dict)
    languages: dict[str, int] = Field(default_factory=dict)
    accepted: int = 0


class ProblemDifficulty(CamelModel):
    total_solved: int = 0
    highest_solved_rating: int | None = None
    buckets: dict[str, int]


class WeekActivity(CamelModel):
    submissions: int = 0
    accepted: int = 0


class StreakSummary(CamelModel):
    current: int = 0
    longest: int = 0
    active_weeks: int = 0


class ProductiveWeek(CamelModel):
    week: str
    submissions: int


class Activity(CamelModel):
    weeks: dict[str, WeekActivity] = Field(default_factory=dict)
    streak: StreakSummary = Field(default_factory=StreakSummary)
    heatmap: dict[str, int] = Field(default_factory=dict)
    most_productive_week: ProductiveWeek | None = None
    avg_accepted_per_week: float = 0.0


class HeatmapDay(CamelModel):
    date: str
    count: int = 0


class ConsistencySummary(CamelModel):
    window_weeks: int
    weekly_counts: list[int] = Field(default_factory=list)
    active_weeks: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    dry_spells: int = 0
    max_weekly_submissions: int = 0
    activity_rate: int = 0
    status: str = "needs-work"


class Badge(CamelModel):
    name: str
    progress: int
    description: str


class AnalyticsReport(CamelModel):
    profile: ProfileAggregate
    ratings: RatingHistory
    submissions: SubmissionStats
    difficulty: ProblemDifficulty
    activity: Activity
    consistency: ConsistencySummary
    badges: list[Badge] = Field(default_factory=list)
    tags: dict[str, int] = Field(default_factory=dict)


class InsightsRequest(CamelModel):
    aggregates: dict[str, Any] | None = None
    text: str | None = None


class InsightsResponse(CamelModel):
    insights: str

"""Pure aggregation of Codeforces records into dashboard analytics."""

from .activity import (
    compute_streak,
    iso_week_key,
    summarize_activity,
    summarize_consistency,
    trailing_heatmap,
    weekly_counts,
)
from .scoring import DEFAULT_FORMULAS, ScoringFormulas, round_half_up
from .summaries import (
    DIFFICULTY_BUCKETS,
    extract_division,
    summarize_difficulty,
    summarize_profile,
    summarize_ratings,
    summarize_submissions,
    tag_distribution,
    upcoming_contests,
)

__all__ = [
    "DEFAULT_FORMULAS",
    "DIFFICULTY_BUCKETS",
    "ScoringFormulas",
    "compute_streak",
    "extract_division",
    "iso_week_key",
    "round_half_up",
    "summarize_activity",
    "summarize_consistency",
    "summarize_difficulty",
    "summarize_profile",
    "summarize_ratings",
    "summarize_submissions",
    "tag_distribution",
    "trailing_heatmap",
    "upcoming_contests",
    "weekly_counts",
]

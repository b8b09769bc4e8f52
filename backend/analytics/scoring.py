"""Heuristic scores derived from already-aggregated statistics.

The weights and targets here are product knobs rather than fixed rules,
so they live on :class:`ScoringFormulas`, which is built from settings and
can be replaced wholesale by passing another instance (or a subclass).
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from app.schemas import Badge, ProblemDifficulty, RatingSummary, SubmissionStats


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward positive infinity."""

    return math.floor(value + 0.5)


def capped_percentage(value: float) -> int:
    return max(0, min(100, round_half_up(value)))


@dataclass(frozen=True, slots=True)
class ScoringFormulas:
    rating_weight: float = 0.9
    secondary_weight: float = 0.1
    success_rate_multiplier: float = 2.0
    solved_target: float = 100.0
    contribution_offset: float = 50.0
    contribution_divisor: float = 2.0
    contest_target: float = 50.0
    rating_target: float = 2500.0

    @classmethod
    def from_settings(cls, settings) -> "ScoringFormulas":
        targets = settings.badge_targets
        return cls(
            rating_weight=settings.score_rating_weight,
            secondary_weight=settings.score_secondary_weight,
            success_rate_multiplier=targets["success_rate_multiplier"],
            solved_target=targets["solved_target"],
            contribution_offset=targets["contribution_offset"],
            contribution_divisor=targets["contribution_divisor"],
            contest_target=targets["contest_target"],
            rating_target=targets["rating_target"],
        )

    def custom_score(self, rating: int | None, secondary_signal: int | None) -> int:
        return round_half_up(
            self.rating_weight * (rating or 0) + self.secondary_weight * (secondary_signal or 0)
        )

    def badges(
        self,
        *,
        current_rating: int | None,
        contribution: int,
        ratings: RatingSummary,
        submissions: SubmissionStats,
        difficulty: ProblemDifficulty,
    ) -> list[Badge]:
        success_rate = (
            submissions.accepted / submissions.total * 100 if submissions.total else 0.0
        )
        solved = difficulty.total_solved
        contests = ratings.total
        rating = current_rating or 0

        return [
            Badge(
                name="Never Give Up",
                progress=capped_percentage(success_rate * self.success_rate_multiplier),
                description=f"{success_rate:.1f}% success rate",
            ),
            Badge(
                name="Speed Demon",
                progress=capped_percentage(solved / self.solved_target * 100),
                description=f"Solved {solved} problems",
            ),
            Badge(
                name="Consistent Coder",
                progress=capped_percentage(
                    (contribution + self.contribution_offset) / self.contribution_divisor
                ),
                description=f"{contribution} contribution",
            ),
            Badge(
                name="Contest Warrior",
                progress=capped_percentage(contests / self.contest_target * 100),
                description=f"Participated in {contests} contests",
            ),
            Badge(
                name="Rating Climber",
                progress=capped_percentage(rating / self.rating_target * 100),
                description=f"Current rating: {rating}",
            ),
        ]


DEFAULT_FORMULAS = ScoringFormulas()

__all__ = ["DEFAULT_FORMULAS", "ScoringFormulas", "capped_percentage", "round_half_up"]

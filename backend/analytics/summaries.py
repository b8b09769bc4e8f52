"""Profile, contest, rating and submission summaries.

Every function here is pure and accepts empty input, returning zero or
``None`` values instead of raising.
"""

from __future__ import annotations

import re
from typing import Iterable, Sequence

from app.domain import ContestRecord, RatingChange, SubmissionRecord, UserRecord
from app.schemas import (
    ContestEntry,
    ProblemDifficulty,
    ProfileAggregate,
    RatingEntry,
    RatingHistory,
    RatingSummary,
    SubmissionStats,
)

from .scoring import DEFAULT_FORMULAS, ScoringFormulas, round_half_up

UNKNOWN_VERDICT = "UNKNOWN"
UNKNOWN_LANGUAGE = "Unknown"
UPCOMING_PHASE = "BEFORE"
DEFAULT_CONTEST_LIMIT = 20

# (key, inclusive lower bound, exclusive upper bound)
DIFFICULTY_BUCKETS: tuple[tuple[str, int | None, int | None], ...] = (
    ("lt1100", None, 1100),
    ("1100_1399", 1100, 1400),
    ("1400_1699", 1400, 1700),
    ("1700_1999", 1700, 2000),
    ("ge2000", 2000, None),
)

_DIVISION_PATTERN = re.compile(r"Div\.?\s*(\d)", re.IGNORECASE)


def summarize_profile(
    user: UserRecord, formulas: ScoringFormulas = DEFAULT_FORMULAS
) -> ProfileAggregate:
    return ProfileAggregate(
        handle=user.handle,
        title=user.rank or None,
        current_rating=user.rating,
        max_rating=user.max_rating,
        max_rank=user.max_rank,
        contribution=user.contribution,
        registration_time=user.registration_time_seconds,
        custom_score=formulas.custom_score(user.rating, user.friend_of_count),
    )


def extract_division(name: str | None) -> str | None:
    """Return ``"Div.N"`` for names such as "Codeforces Round 900 (Div. 2)"."""

    if not name:
        return None
    match = _DIVISION_PATTERN.search(name)
    return f"Div.{match.group(1)}" if match else None


def upcoming_contests(
    contests: Iterable[ContestRecord],
    *,
    now: float,
    limit: int = DEFAULT_CONTEST_LIMIT,
) -> list[ContestEntry]:
    upcoming = [
        contest
        for contest in contests
        if contest.phase == UPCOMING_PHASE
        and contest.start_time_seconds is not None
        and contest.start_time_seconds > now
    ]
    upcoming.sort(key=lambda contest: contest.start_time_seconds)
    return [
        ContestEntry(
            name=contest.name,
            division=extract_division(contest.name),
            start_time_seconds=contest.start_time_seconds,
            duration_seconds=contest.duration_seconds,
        )
        for contest in upcoming[:limit]
    ]


def summarize_ratings(changes: Sequence[RatingChange]) -> RatingHistory:
    total = len(changes)
    # Entries missing a rank or rating still count toward ``total``.
    best_rank = min((change.rank for change in changes if change.rank is not None), default=None)
    deltas = [change.delta for change in changes if change.delta is not None]
    avg_delta = round_half_up(sum(deltas) / len(deltas)) if deltas else None
    entries = [
        RatingEntry(
            contest_name=change.contest_name,
            contest_id=change.contest_id,
            rating_update_time_seconds=change.rating_update_time_seconds,
            rank=change.rank,
            old_rating=change.old_rating,
            new_rating=change.new_rating,
        )
        for change in changes
    ]
    return RatingHistory(
        summary=RatingSummary(total=total, best_rank=best_rank, avg_delta=avg_delta),
        entries=entries,
    )


def summarize_submissions(submissions: Sequence[SubmissionRecord]) -> SubmissionStats:
    verdict_counts: dict[str, int] = {}
    languages: dict[str, int] = {}
    accepted = 0
    for submission in submissions:
        verdict = submission.verdict or UNKNOWN_VERDICT
        verdict_counts[verdict] = verdict_counts.get(verdict, 0) + 1
        language = submission.programming_language or UNKNOWN_LANGUAGE
        languages[language] = languages.get(language, 0) + 1
        if verdict == "OK":
            accepted += 1
    return SubmissionStats(
        total=len(submissions),
        verdict_counts=verdict_counts,
        languages=languages,
        accepted=accepted,
    )


def bucket_for_rating(rating: int) -> str:
    for key, lower, upper in DIFFICULTY_BUCKETS:
        if (lower is None or rating >= lower) and (upper is None or rating < upper):
            return key
    raise AssertionError(f"rating {rating} fell outside every difficulty bucket")


def empty_buckets() -> dict[str, int]:
    return {key: 0 for key, _, _ in DIFFICULTY_BUCKETS}


def summarize_difficulty(submissions: Sequence[SubmissionRecord]) -> ProblemDifficulty:
    """Histogram distinct solved problems by rating.

    A problem is solved when any of its submissions is accepted and counts
    once however many accepted attempts it has. Unrated problems count
    toward ``total_solved`` but land in no bucket.
    """

    solved = {submission.problem.key for submission in submissions if submission.accepted}

    buckets = empty_buckets()
    counted: set[str] = set()
    highest: int | None = None
    for submission in submissions:
        key = submission.problem.key
        if not submission.accepted or key not in solved or key in counted:
            continue
        counted.add(key)
        rating = submission.problem.rating
        if rating is None:
            continue
        buckets[bucket_for_rating(rating)] += 1
        highest = rating if highest is None else max(highest, rating)

    return ProblemDifficulty(
        total_solved=len(counted),
        highest_solved_rating=highest,
        buckets=buckets,
    )


def tag_distribution(submissions: Sequence[SubmissionRecord]) -> dict[str, int]:
    """Count problem tags over distinct solved problems, most frequent first."""

    seen: set[str] = set()
    counts: dict[str, int] = {}
    for submission in submissions:
        if not submission.accepted or submission.problem.key in seen:
            continue
        seen.add(submission.problem.key)
        for tag in submission.problem.tags:
            counts[tag] = counts.get(tag, 0) + 1
    return dict(sorted(counts.items(), key=lambda item: (-item[1], item[0])))


__all__ = [
    "DIFFICULTY_BUCKETS",
    "UNKNOWN_LANGUAGE",
    "UNKNOWN_VERDICT",
    "bucket_for_rating",
    "empty_buckets",
    "extract_division",
    "summarize_difficulty",
    "summarize_profile",
    "summarize_ratings",
    "summarize_submissions",
    "tag_distribution",
    "upcoming_contests",
]

"""Typed records for the Codeforces entities the analytics consume."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class UserRecord:
    """Subset of ``user.info`` fields used by the profile view."""

    handle: str
    rank: str | None = None
    rating: int | None = None
    max_rating: int | None = None
    max_rank: str | None = None
    contribution: int = 0
    friend_of_count: int = 0
    registration_time_seconds: int | None = None
    raw_data: dict[str, Any] | None = None


@dataclass(slots=True)
class RatingChange:
    """One rated contest from ``user.rating``."""

    contest_id: int | None
    contest_name: str
    rank: int | None
    rating_update_time_seconds: int | None
    old_rating: int | None
    new_rating: int | None

    @property
    def delta(self) -> int | None:
        if self.old_rating is None or self.new_rating is None:
            return None
        return self.new_rating - self.old_rating


@dataclass(slots=True)
class ProblemRef:
    contest_id: int | None
    index: str | None
    name: str | None = None
    rating: int | None = None
    tags: list[str] = field(default_factory=list)

    @property
    def key(self) -> str:
        return f"{self.contest_id}-{self.index}"


@dataclass(slots=True)
class SubmissionRecord:
    """One judged (or pending) attempt from ``user.status``."""

    id: int | None
    creation_time_seconds: int | None
    verdict: str | None
    programming_language: str | None
    problem: ProblemRef

    @property
    def accepted(self) -> bool:
        return self.verdict == "OK"


@dataclass(slots=True)
class ContestRecord:
    id: int | None
    name: str
    phase: str | None
    start_time_seconds: int | None
    duration_seconds: int | None
    type: str | None = None

"""Convert raw Codeforces payloads into typed domain records.

Upstream objects routinely omit fields (unrated users have no ``rating``,
problems in fresh contests have no difficulty, submissions still in
system testing have no ``verdict``). Missing values map to ``None`` or a
neutral default; items that are not objects at all are skipped.
"""

from __future__ import annotations

from typing import Any, Iterable

from loguru import logger

from app.domain import ContestRecord, ProblemRef, RatingChange, SubmissionRecord, UserRecord

from .errors import ValidationError


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _as_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, list):
        return value
    return []


def _iter_objects(raw_items: Any, kind: str) -> Iterable[dict[str, Any]]:
    if raw_items is None:
        return
    if not isinstance(raw_items, list):
        logger.warning("Expected a list of {} records, got {}", kind, type(raw_items).__name__)
        return
    for item in raw_items:
        if not isinstance(item, dict):
            logger.warning("Skipping malformed {} record: {!r}", kind, item)
            continue
        yield item


def normalize_user(raw: dict[str, Any]) -> UserRecord:
    if not isinstance(raw, dict):
        raise ValidationError("user.info returned a non-object user record")
    handle = _as_str(raw.get("handle"))
    if not handle:
        raise ValidationError("user.info record is missing a handle")
    return UserRecord(
        handle=handle,
        rank=_as_str(raw.get("rank")),
        rating=_as_int(raw.get("rating")),
        max_rating=_as_int(raw.get("maxRating")),
        max_rank=_as_str(raw.get("maxRank")),
        contribution=_as_int(raw.get("contribution")) or 0,
        friend_of_count=_as_int(raw.get("friendOfCount")) or 0,
        registration_time_seconds=_as_int(raw.get("registrationTimeSeconds")),
        raw_data=raw,
    )


def normalize_users(raw_items: Any) -> list[UserRecord]:
    users: list[UserRecord] = []
    for item in _iter_objects(raw_items, "user"):
        try:
            users.append(normalize_user(item))
        except ValidationError as exc:
            logger.warning("Skipping user record: {}", exc)
    return users


def normalize_rating_changes(raw_items: Any) -> list[RatingChange]:
    """Keep upstream (chronological) order; missing numbers stay ``None``."""

    changes: list[RatingChange] = []
    for item in _iter_objects(raw_items, "rating change"):
        changes.append(
            RatingChange(
                contest_id=_as_int(item.get("contestId")),
                contest_name=_as_str(item.get("contestName")) or "",
                rank=_as_int(item.get("rank")),
                rating_update_time_seconds=_as_int(item.get("ratingUpdateTimeSeconds")),
                old_rating=_as_int(item.get("oldRating")),
                new_rating=_as_int(item.get("newRating")),
            )
        )
    return changes


def normalize_problem(raw: Any) -> ProblemRef:
    if not isinstance(raw, dict):
        return ProblemRef(contest_id=None, index=None)
    return ProblemRef(
        contest_id=_as_int(raw.get("contestId")),
        index=_as_str(raw.get("index")),
        name=_as_str(raw.get("name")),
        rating=_as_int(raw.get("rating")),
        tags=[str(tag) for tag in _as_list(raw.get("tags"))],
    )


def normalize_submissions(raw_items: Any) -> list[SubmissionRecord]:
    return [
        SubmissionRecord(
            id=_as_int(item.get("id")),
            creation_time_seconds=_as_int(item.get("creationTimeSeconds")),
            verdict=_as_str(item.get("verdict")),
            programming_language=_as_str(item.get("programmingLanguage")),
            problem=normalize_problem(item.get("problem")),
        )
        for item in _iter_objects(raw_items, "submission")
    ]


def normalize_contests(raw_items: Any) -> list[ContestRecord]:
    return [
        ContestRecord(
            id=_as_int(item.get("id")),
            name=_as_str(item.get("name")) or "",
            phase=_as_str(item.get("phase")),
            start_time_seconds=_as_int(item.get("startTimeSeconds")),
            duration_seconds=_as_int(item.get("durationSeconds")),
            type=_as_str(item.get("type")),
        )
        for item in _iter_objects(raw_items, "contest")
    ]


__all__ = [
    "normalize_contests",
    "normalize_problem",
    "normalize_rating_changes",
    "normalize_submissions",
    "normalize_user",
    "normalize_users",
]

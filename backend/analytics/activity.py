"""Time-bucketed activity: ISO weeks, streaks, daily heatmap and consistency."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Mapping, Sequence

from app.domain import SubmissionRecord
from app.schemas import (
    Activity,
    ConsistencySummary,
    HeatmapDay,
    ProductiveWeek,
    StreakSummary,
    WeekActivity,
)

from .scoring import round_half_up

_WEEK = timedelta(days=7)


def iso_week_key(moment: datetime | date) -> str:
    year, week, _ = moment.isocalendar()
    return f"{year}-W{week:02d}"


def week_start(key: str) -> date:
    """Monday of the ISO week named by ``YYYY-Www``."""

    year, week = key.split("-W", 1)
    return date.fromisocalendar(int(year), int(week), 1)


def _submission_moment(submission: SubmissionRecord, tz: tzinfo) -> datetime | None:
    if submission.creation_time_seconds is None:
        return None
    return datetime.fromtimestamp(submission.creation_time_seconds, tz=tz)


def compute_streak(week_keys: Sequence[str], *, now: datetime) -> StreakSummary:
    """Streaks over chronologically sorted active-week keys.

    The current streak survives only while the newest active week is this
    ISO week or the one before it.
    """

    current = 0
    longest = 0
    previous: date | None = None
    for key in week_keys:
        start = week_start(key)
        if previous is not None and start - previous == _WEEK:
            current += 1
        else:
            current = 1
        previous = start
        longest = max(longest, current)

    if week_keys:
        recent = {iso_week_key(now), iso_week_key(now - _WEEK)}
        if week_keys[-1] not in recent:
            current = 0

    return StreakSummary(current=current, longest=longest, active_weeks=len(week_keys))


def summarize_activity(
    submissions: Sequence[SubmissionRecord],
    *,
    now: datetime,
    tz: tzinfo = timezone.utc,
) -> Activity:
    weekly: dict[str, WeekActivity] = {}
    heatmap: dict[str, int] = {}

    for submission in submissions:
        moment = _submission_moment(submission, tz)
        if moment is None:
            continue
        bucket = weekly.setdefault(iso_week_key(moment), WeekActivity())
        bucket.submissions += 1
        if submission.accepted:
            bucket.accepted += 1
        day = moment.date().isoformat()
        heatmap[day] = heatmap.get(day, 0) + 1

    week_keys = sorted(weekly)
    weeks = {key: weekly[key] for key in week_keys}

    most_productive: ProductiveWeek | None = None
    for key, bucket in weeks.items():
        if most_productive is None or bucket.submissions > most_productive.submissions:
            most_productive = ProductiveWeek(week=key, submissions=bucket.submissions)

    total_accepted = sum(bucket.accepted for bucket in weeks.values())
    return Activity(
        weeks=weeks,
        streak=compute_streak(week_keys, now=now.astimezone(tz)),
        heatmap=dict(sorted(heatmap.items())),
        most_productive_week=most_productive,
        avg_accepted_per_week=total_accepted / len(week_keys) if week_keys else 0.0,
    )


def trailing_heatmap(
    heatmap: Mapping[str, int], *, today: date, days: int = 365
) -> list[HeatmapDay]:
    """Zero-filled daily counts for the ``days`` days ending at ``today``."""

    first = today - timedelta(days=days - 1)
    window: list[HeatmapDay] = []
    for offset in range(days):
        key = (first + timedelta(days=offset)).isoformat()
        window.append(HeatmapDay(date=key, count=heatmap.get(key, 0)))
    return window


def weekly_counts(
    submissions: Sequence[SubmissionRecord], *, now: datetime, weeks: int = 26
) -> list[int]:
    """Submissions per trailing seven-day period, oldest first."""

    counts = [0] * weeks
    reference = now.timestamp()
    seconds_per_week = _WEEK.total_seconds()
    for submission in submissions:
        if submission.creation_time_seconds is None:
            continue
        elapsed = reference - submission.creation_time_seconds
        if elapsed < 0:
            continue
        weeks_ago = int(elapsed // seconds_per_week)
        if weeks_ago < weeks:
            counts[weeks - 1 - weeks_ago] += 1
    return counts


def consistency_status(activity_rate: float) -> str:
    if activity_rate >= 80:
        return "excellent"
    if activity_rate >= 60:
        return "good"
    if activity_rate >= 40:
        return "inconsistent"
    return "needs-work"


def summarize_consistency(counts: Sequence[int]) -> ConsistencySummary:
    """Summarize a fixed window of weekly counts ordered oldest to newest.

    ``dry_spells`` is the number of active runs that follow an idle week
    inside the window. The current streak ends at the newest week, or at
    the week before it when the newest week is still idle.
    """

    window = len(counts)
    active_weeks = sum(1 for count in counts if count > 0)

    longest = 0
    run = 0
    dry_spells = 0
    for index, count in enumerate(counts):
        if count > 0:
            if run == 0 and index > 0:
                dry_spells += 1
            run += 1
            longest = max(longest, run)
        else:
            run = 0

    current = 0
    tail = list(counts)
    if tail and tail[-1] == 0:
        tail.pop()
    for count in reversed(tail):
        if count <= 0:
            break
        current += 1

    rate = active_weeks / window * 100 if window else 0.0
    return ConsistencySummary(
        window_weeks=window,
        weekly_counts=list(counts),
        active_weeks=active_weeks,
        current_streak=current,
        longest_streak=longest,
        dry_spells=dry_spells,
        max_weekly_submissions=max(counts, default=0),
        activity_rate=round_half_up(rate),
        status=consistency_status(rate),
    )


__all__ = [
    "compute_streak",
    "consistency_status",
    "iso_week_key",
    "summarize_activity",
    "summarize_consistency",
    "trailing_heatmap",
    "week_start",
    "weekly_counts",
]

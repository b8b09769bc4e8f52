from __future__ import annotations

import pytest

from analytics import (
    DIFFICULTY_BUCKETS,
    ScoringFormulas,
    extract_division,
    summarize_difficulty,
    summarize_profile,
    summarize_ratings,
    summarize_submissions,
    tag_distribution,
    upcoming_contests,
)
from analytics.summaries import bucket_for_rating
from app.domain import ContestRecord, RatingChange
from codeforces.normalize import normalize_submissions, normalize_user

from conftest import raw_submission

NOW_TS = 1_700_000_000


def _contest(name: str, phase: str, start: int | None) -> ContestRecord:
    return ContestRecord(id=None, name=name, phase=phase, start_time_seconds=start, duration_seconds=7200)


def _change(rank: int, old: int, new: int) -> RatingChange:
    return RatingChange(
        contest_id=rank,
        contest_name=f"Round {rank}",
        rank=rank,
        rating_update_time_seconds=None,
        old_rating=old,
        new_rating=new,
    )


def test_profile_passthrough_and_custom_score(sample_user_payload):
    profile = summarize_profile(normalize_user(sample_user_payload))

    assert profile.handle == "tourist"
    assert profile.title == "legendary grandmaster"
    assert profile.current_rating == 3500
    assert profile.max_rank == "tourist"
    assert profile.registration_time == 1265987288
    assert profile.custom_score == 10150


def test_custom_score_rounds_half_up():
    user = normalize_user({"handle": "x", "rating": 1500, "friendOfCount": 25})
    assert summarize_profile(user).custom_score == 1353


def test_custom_score_uses_swappable_formula():
    user = normalize_user({"handle": "x", "rating": 1000, "friendOfCount": 10})
    formulas = ScoringFormulas(rating_weight=1.0, secondary_weight=0.0)
    assert summarize_profile(user, formulas).custom_score == 1000


def test_unrated_profile_has_null_rating_and_zero_score():
    profile = summarize_profile(normalize_user({"handle": "fresh"}))
    assert profile.current_rating is None
    assert profile.title is None
    assert profile.custom_score == 0


def test_upcoming_contests_filter_and_sort():
    contests = [
        _contest("Round A (Div. 2)", "BEFORE", NOW_TS + 100),
        _contest("Round B", "FINISHED", NOW_TS - 100),
        _contest("Round C (div 1)", "BEFORE", NOW_TS + 50),
    ]
    result = upcoming_contests(contests, now=NOW_TS)

    assert [entry.start_time_seconds for entry in result] == [NOW_TS + 50, NOW_TS + 100]
    assert [entry.division for entry in result] == ["Div.1", "Div.2"]


def test_upcoming_contests_excludes_started_and_caps_count():
    contests = [_contest(f"R{i}", "BEFORE", NOW_TS + i) for i in range(30, 0, -1)]
    contests.append(_contest("Now", "BEFORE", NOW_TS))
    contests.append(_contest("Unknown start", "BEFORE", None))

    result = upcoming_contests(contests, now=NOW_TS, limit=20)

    assert len(result) == 20
    assert result[0].start_time_seconds == NOW_TS + 1
    assert result[-1].start_time_seconds == NOW_TS + 20
    assert upcoming_contests([], now=NOW_TS) == []


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("Codeforces Round 900 (Div. 2)", "Div.2"),
        ("Educational Round (div.3)", "Div.3"),
        ("Codeforces Round (DIV 4)", "Div.4"),
        ("Good Bye 2023", None),
        ("", None),
    ],
)
def test_extract_division(name, expected):
    assert extract_division(name) == expected


def test_rating_summary():
    history = summarize_ratings([_change(12, 1500, 1520), _change(3, 1520, 1515), _change(50, 1515, 1525)])

    assert history.summary.total == 3
    assert history.summary.best_rank == 3
    assert history.summary.avg_delta == 8
    assert [entry.rank for entry in history.entries] == [12, 3, 50]


def test_rating_summary_counts_incomplete_entries_but_skips_them_in_stats():
    incomplete = RatingChange(
        contest_id=9,
        contest_name="Unrated leftovers",
        rank=None,
        rating_update_time_seconds=None,
        old_rating=None,
        new_rating=None,
    )
    history = summarize_ratings([_change(12, 1500, 1520), incomplete, _change(3, 1520, 1515)])

    assert history.summary.total == 3
    assert history.summary.best_rank == 3
    assert history.summary.avg_delta == 8
    assert history.entries[1].rank is None
    assert history.entries[1].new_rating is None


def test_rating_summary_empty():
    history = summarize_ratings([])
    assert history.summary.total == 0
    assert history.summary.best_rank is None
    assert history.summary.avg_delta is None
    assert history.entries == []


def test_submission_overview_counts_in_first_seen_order():
    submissions = normalize_submissions(
        [
            raw_submission(created=1, verdict="WRONG_ANSWER", language="Python 3"),
            raw_submission(created=2, verdict="OK", language="GNU C++17"),
            raw_submission(created=3, verdict=None, language=None),
            raw_submission(created=4, verdict="OK", language="Python 3"),
        ]
    )
    stats = summarize_submissions(submissions)

    assert stats.total == 4
    assert stats.accepted == 2
    assert list(stats.verdict_counts.items()) == [("WRONG_ANSWER", 1), ("OK", 2), ("UNKNOWN", 1)]
    assert stats.languages == {"Python 3": 2, "GNU C++17": 1, "Unknown": 1}


def test_empty_submission_overview_and_difficulty():
    stats = summarize_submissions([])
    assert stats.model_dump(by_alias=True) == {
        "total": 0,
        "verdictCounts": {},
        "languages": {},
        "accepted": 0,
    }

    difficulty = summarize_difficulty([])
    assert difficulty.total_solved == 0
    assert difficulty.highest_solved_rating is None
    assert set(difficulty.buckets) == {key for key, _, _ in DIFFICULTY_BUCKETS}
    assert all(count == 0 for count in difficulty.buckets.values())


def test_problem_counted_once_among_repeated_submissions():
    raw = [
        raw_submission(created=1, verdict="WRONG_ANSWER", rating=1500),
        raw_submission(created=2, verdict="TIME_LIMIT_EXCEEDED", rating=1500),
        raw_submission(created=3, verdict="OK", rating=1500),
        raw_submission(created=4, verdict="WRONG_ANSWER", rating=1500),
        raw_submission(created=5, verdict="OK", rating=1500),
    ]
    difficulty = summarize_difficulty(normalize_submissions(raw))

    assert difficulty.total_solved == 1
    assert difficulty.buckets["1400_1699"] == 1
    assert sum(difficulty.buckets.values()) == 1
    assert difficulty.highest_solved_rating == 1500


def test_unrated_solved_problem_counts_toward_total_only():
    raw = [
        raw_submission(created=1, verdict="OK", contest_id=1, index="A", rating=None),
        raw_submission(created=2, verdict="OK", contest_id=1, index="B", rating=2400),
        raw_submission(created=3, verdict="WRONG_ANSWER", contest_id=1, index="C", rating=3000),
    ]
    difficulty = summarize_difficulty(normalize_submissions(raw))

    assert difficulty.total_solved == 2
    assert difficulty.buckets["ge2000"] == 1
    assert sum(difficulty.buckets.values()) == 1
    assert difficulty.highest_solved_rating == 2400


@pytest.mark.parametrize(
    ("rating", "bucket"),
    [
        (800, "lt1100"),
        (1099, "lt1100"),
        (1100, "1100_1399"),
        (1399, "1100_1399"),
        (1400, "1400_1699"),
        (1700, "1700_1999"),
        (1999, "1700_1999"),
        (2000, "ge2000"),
        (3500, "ge2000"),
    ],
)
def test_bucket_boundaries(rating, bucket):
    assert bucket_for_rating(rating) == bucket


def test_tag_distribution_counts_distinct_solved_problems():
    raw = [
        raw_submission(created=1, verdict="OK", index="A", tags=["math", "greedy"]),
        raw_submission(created=2, verdict="OK", index="A", tags=["math", "greedy"]),
        raw_submission(created=3, verdict="OK", index="B", tags=["math"]),
        raw_submission(created=4, verdict="WRONG_ANSWER", index="C", tags=["dp"]),
    ]
    assert tag_distribution(normalize_submissions(raw)) == {"math": 2, "greedy": 1}

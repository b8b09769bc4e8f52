"""Domain records normalized from Codeforces API payloads."""

from .models import ContestRecord, ProblemRef, RatingChange, SubmissionRecord, UserRecord

__all__ = [
    "ContestRecord",
    "ProblemRef",
    "RatingChange",
    "SubmissionRecord",
    "UserRecord",
]

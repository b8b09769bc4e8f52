"""Failure taxonomy for calls against the Codeforces API."""

from __future__ import annotations


class CodeforcesError(Exception):
    """Base class for every failure raised by the upstream integration."""


class ConfigurationError(CodeforcesError):
    """Raised when API credentials are missing; never retryable."""


class UpstreamError(CodeforcesError):
    """The upstream answered with an envelope whose status is not ``OK``."""

    def __init__(self, comment: str, *, status_code: int | None = None) -> None:
        super().__init__(comment)
        self.comment = comment
        self.status_code = status_code


class TransportError(CodeforcesError):
    """Network failure or an HTTP response without a parseable envelope."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(CodeforcesError):
    """A successful envelope carried a result with an unexpected shape."""


__all__ = [
    "CodeforcesError",
    "ConfigurationError",
    "TransportError",
    "UpstreamError",
    "ValidationError",
]

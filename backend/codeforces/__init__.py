"""Signed, rate-limited access to the Codeforces API."""

from .client import CodeforcesClient, parse_envelope
from .errors import (
    CodeforcesError,
    ConfigurationError,
    TransportError,
    UpstreamError,
    ValidationError,
)
from .gateway import RateLimitedGateway
from .signing import Credentials, RequestSigner, SignedRequest

__all__ = [
    "CodeforcesClient",
    "CodeforcesError",
    "ConfigurationError",
    "Credentials",
    "RateLimitedGateway",
    "RequestSigner",
    "SignedRequest",
    "TransportError",
    "UpstreamError",
    "ValidationError",
    "parse_envelope",
]

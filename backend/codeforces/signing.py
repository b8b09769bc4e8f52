"""Request signing for the authenticated Codeforces API.

The upstream verifies ``apiSig`` by recomputing it from the exact
parameter list it receives, so every step here (stringification, sort
order, the unencoded signature base) has to match its scheme bit for bit.
"""

from __future__ import annotations

import hashlib
import secrets
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Iterable, Mapping
from urllib.parse import quote

from .errors import ConfigurationError

DEFAULT_BASE_URL = "https://codeforces.com/api"
NONCE_BYTES = 3

# Characters left untouched by JavaScript's encodeURIComponent.
_UNRESERVED = "-_.!~*'()"

ParamPairs = tuple[tuple[str, str], ...]


@dataclass(frozen=True, slots=True)
class Credentials:
    """API key pair loaded once per process."""

    api_key: str
    api_secret: str

    def __repr__(self) -> str:
        return "Credentials(api_key='***', api_secret='***')"

    @classmethod
    def from_values(cls, api_key: str | None, api_secret: str | None) -> "Credentials | None":
        key = (api_key or "").strip()
        secret = (api_secret or "").strip()
        if not key or not secret:
            return None
        return cls(api_key=key, api_secret=secret)


@dataclass(frozen=True, slots=True)
class SignedRequest:
    """A fully signed call ready to be dispatched."""

    method: str
    params: ParamPairs
    time: int
    nonce: str
    signature: str
    base_url: str = DEFAULT_BASE_URL

    @property
    def query(self) -> str:
        return encode_query(self.params)

    @property
    def url(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.method}?{self.query}&apiSig={self.signature}"


def stringify_param(value: Any) -> str:
    """Render a parameter value the way the upstream expects to read it back."""

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        rendered = repr(value)
        if "e" in rendered or "E" in rendered:
            rendered = format(Decimal(rendered), "f")
        return rendered
    return str(value)


def sort_params(params: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> ParamPairs:
    """Drop absent values, stringify the rest and sort by key, then value."""

    items = params.items() if isinstance(params, Mapping) else params
    pairs = [(str(key), stringify_param(value)) for key, value in items if value is not None]
    return tuple(sorted(pairs))


def encode_query(pairs: Iterable[tuple[str, str]]) -> str:
    return "&".join(f"{key}={quote(value, safe=_UNRESERVED)}" for key, value in pairs)


def signature_base(nonce: str, method: str, pairs: Iterable[tuple[str, str]], secret: str) -> str:
    """Build ``{nonce}/{method}?{k=v&...}#{secret}`` from already-sorted pairs."""

    joined = "&".join(f"{key}={value}" for key, value in pairs)
    return f"{nonce}/{method}?{joined}#{secret}"


def compute_signature(nonce: str, method: str, pairs: Iterable[tuple[str, str]], secret: str) -> str:
    digest = hashlib.sha512(signature_base(nonce, method, pairs, secret).encode("utf-8")).hexdigest()
    return f"{nonce}{digest}"


def generate_nonce() -> str:
    return secrets.token_hex(NONCE_BYTES)


class RequestSigner:
    """Produces signed request descriptors for a fixed credential pair."""

    def __init__(
        self,
        credentials: Credentials | None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        clock: Callable[[], float] = time.time,
        nonce_factory: Callable[[], str] = generate_nonce,
    ) -> None:
        self._credentials = credentials
        self.base_url = base_url
        self._clock = clock
        self._nonce_factory = nonce_factory

    @property
    def configured(self) -> bool:
        return self._credentials is not None

    def sign(
        self,
        method: str,
        params: Mapping[str, Any] | None = None,
        *,
        nonce: str | None = None,
        timestamp: int | None = None,
    ) -> SignedRequest:
        if self._credentials is None:
            raise ConfigurationError("Missing CF_KEY/CF_SECRET")

        issued_at = int(self._clock()) if timestamp is None else int(timestamp)
        merged: dict[str, Any] = dict(params or {})
        merged["apiKey"] = self._credentials.api_key
        merged["time"] = issued_at
        pairs = sort_params(merged)

        token = nonce if nonce is not None else self._nonce_factory()
        signature = compute_signature(token, method, pairs, self._credentials.api_secret)
        return SignedRequest(
            method=method,
            params=pairs,
            time=issued_at,
            nonce=token,
            signature=signature,
            base_url=self.base_url,
        )


__all__ = [
    "Credentials",
    "DEFAULT_BASE_URL",
    "RequestSigner",
    "SignedRequest",
    "compute_signature",
    "encode_query",
    "generate_nonce",
    "signature_base",
    "sort_params",
    "stringify_param",
]

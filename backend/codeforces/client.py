from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from typing import Any, Callable, Mapping

import httpx
from loguru import logger

from app.core.config import Settings
from app.domain import ContestRecord, RatingChange, SubmissionRecord, UserRecord

from .errors import TransportError, UpstreamError
from .gateway import RateLimitedGateway
from .normalize import (
    normalize_contests,
    normalize_rating_changes,
    normalize_submissions,
    normalize_users,
)
from .signing import Credentials, ParamPairs, RequestSigner, sort_params


def parse_envelope(response: httpx.Response) -> Any:
    """Unwrap ``{status, result | comment}`` or raise the matching failure."""

    try:
        payload = response.json()
    except ValueError:
        payload = None

    if not isinstance(payload, dict) or "status" not in payload:
        if response.is_success:
            raise TransportError(
                "Codeforces returned a malformed response body",
                status_code=response.status_code,
            )
        raise TransportError(
            f"Codeforces responded with HTTP {response.status_code}",
            status_code=response.status_code,
        )

    if payload.get("status") != "OK":
        comment = str(payload.get("comment") or "Codeforces API call failed")
        raise UpstreamError(comment, status_code=response.status_code)
    return payload.get("result")


class CodeforcesClient:
    """Typed wrapper over the signed, rate-limited Codeforces API."""

    def __init__(
        self,
        gateway: RateLimitedGateway,
        signer: RequestSigner,
        *,
        cache_ttl: float = 0.0,
        submission_count: int = 10000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.gateway = gateway
        self.signer = signer
        self.cache_ttl = cache_ttl
        self.submission_count = submission_count
        self._clock = clock
        self._cache: dict[tuple[str, ParamPairs], tuple[float, Any]] = {}
        self._inflight: dict[tuple[str, ParamPairs], asyncio.Future[Any]] = {}

    @classmethod
    def from_settings(cls, settings: Settings, gateway: RateLimitedGateway | None = None) -> "CodeforcesClient":
        signer = RequestSigner(
            Credentials.from_values(settings.cf_key, settings.cf_secret),
            base_url=settings.cf_base_url,
        )
        gateway = gateway or RateLimitedGateway(
            min_interval=settings.cf_min_interval_seconds,
            timeout=settings.cf_request_timeout_seconds,
        )
        return cls(
            gateway,
            signer,
            cache_ttl=settings.cf_response_cache_seconds,
            submission_count=settings.submission_fetch_count,
        )

    async def call(self, method: str, params: Mapping[str, Any] | None = None) -> Any:
        cache_key = (method, sort_params(params or {}))
        cached = self._cached(cache_key)
        if cached is not None:
            return cached[1]

        # Identical concurrent calls share one upstream request.
        pending = self._inflight.get(cache_key)
        if pending is None:
            pending = asyncio.ensure_future(self._fetch(cache_key, method, params))
            self._inflight[cache_key] = pending
        return await asyncio.shield(pending)

    async def _fetch(
        self,
        cache_key: tuple[str, ParamPairs],
        method: str,
        params: Mapping[str, Any] | None,
    ) -> Any:
        try:
            signed = self.signer.sign(method, params)
            response = await self.gateway.dispatch(signed.url, label=method)
            try:
                result = parse_envelope(response)
            except UpstreamError as exc:
                logger.warning("Codeforces {} failed: {}", method, exc.comment)
                raise
            if self.cache_ttl > 0:
                self._store(cache_key, result)
            return result
        finally:
            self._inflight.pop(cache_key, None)

    def _cached(self, key: tuple[str, ParamPairs]) -> tuple[float, Any] | None:
        entry = self._cache.get(key)
        if entry is None:
            return None
        if entry[0] <= self._clock():
            del self._cache[key]
            return None
        return entry

    def _store(self, key: tuple[str, ParamPairs], result: Any) -> None:
        now = self._clock()
        expired = [item for item, (expires_at, _) in self._cache.items() if expires_at <= now]
        for item in expired:
            del self._cache[item]
        self._cache[key] = (now + self.cache_ttl, result)

    def clear_cache(self) -> None:
        self._cache.clear()

    async def user_info(self, handles: str | Sequence[str]) -> list[UserRecord]:
        if not isinstance(handles, str):
            handles = ";".join(handle.strip() for handle in handles)
        return normalize_users(await self.call("user.info", {"handles": handles}))

    async def user_rating(self, handle: str) -> list[RatingChange]:
        return normalize_rating_changes(await self.call("user.rating", {"handle": handle.strip()}))

    async def user_status(
        self,
        handle: str,
        *,
        from_: int = 1,
        count: int | None = None,
    ) -> list[SubmissionRecord]:
        params = {"handle": handle.strip(), "from": from_, "count": count or self.submission_count}
        return normalize_submissions(await self.call("user.status", params))

    async def contest_list(self, *, gym: bool = False) -> list[ContestRecord]:
        return normalize_contests(await self.call("contest.list", {"gym": gym}))

    async def aclose(self) -> None:
        await self.gateway.aclose()

    async def __aenter__(self) -> "CodeforcesClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

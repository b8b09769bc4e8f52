"""Process-wide gate that spaces out outbound calls to the upstream API."""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable

import httpx
from loguru import logger

from .errors import TransportError

DEFAULT_MIN_INTERVAL = 2.0


class RateLimitedGateway:
    """Serializes upstream requests with a minimum spacing between them.

    Callers queue on a single :class:`asyncio.Lock`, which wakes waiters in
    arrival order. The last-call timestamp is written after every request,
    failed ones included, so a failure still consumes its slot.
    """

    def __init__(
        self,
        *,
        min_interval: float = DEFAULT_MIN_INTERVAL,
        timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.min_interval = min_interval
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._last_call: float | None = None

    @property
    def last_call(self) -> float | None:
        return self._last_call

    async def dispatch(self, url: str, *, label: str | None = None) -> httpx.Response:
        """Perform a GET once the gate allows it and return the raw response."""

        async with self._lock:
            if self._last_call is not None:
                wait = self.min_interval - (self._clock() - self._last_call)
                if wait > 0:
                    logger.debug("Codeforces gate holding {} for {:.3f}s", label or "request", wait)
                    await self._sleep(wait)
            logger.info("Codeforces GET {}", label or "request")
            try:
                return await self._client.get(url)
            except httpx.HTTPError as exc:
                logger.warning("Codeforces transport failure for {}: {}", label or "request", exc)
                raise TransportError(str(exc) or exc.__class__.__name__) from exc
            finally:
                self._last_call = self._clock()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "RateLimitedGateway":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


__all__ = ["DEFAULT_MIN_INTERVAL", "RateLimitedGateway"]

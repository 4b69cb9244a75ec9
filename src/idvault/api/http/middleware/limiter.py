"""In-process sliding-window rate limiting for the HTTP layer.

State lives in memory and resets on restart; each worker process counts on its
own.
"""

from __future__ import annotations

import asyncio
import time
from collections import defaultdict, deque
from collections.abc import Callable
from typing import Any

from fastapi import HTTPException, Request, Response
from loguru import logger

from src.idvault.runtime.config.config_data import RateLimiterConfig


class DefaultLocalRateLimiter:
    """Simple in-memory sliding-window limiter."""

    def __init__(
        self,
        times: int,
        milliseconds: int,
        per_endpoint: bool = True,
        per_method: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._hits: defaultdict[str, deque[float]] = defaultdict(deque)
        self._lock = asyncio.Lock()
        self._times = times
        self._seconds = milliseconds / 1000
        self._per_endpoint = per_endpoint
        self._per_method = per_method
        self._clock = clock
        self._last_cleanup = clock()
        self._cleanup_interval = 60.0

    async def __call__(self, request: Request, response: Response) -> Any:
        key = self._make_key(request)
        await self._throttle(key)

    def _make_key(self, request: Request) -> str:
        uid = getattr(request.state, "uid", None)
        if uid is not None:
            ident = f"user:{uid}"
        else:
            client_host = request.client.host if request.client else "anonymous"
            ident = f"ip:{client_host}"

        parts = [ident]
        if self._per_method:
            parts.append(request.method)
        if self._per_endpoint:
            route = request.scope.get("route")
            template = getattr(route, "path", None)
            parts.append((template or request.url.path).rstrip("/"))
        return ":".join(parts)

    def _cleanup_old_keys(self, now: float) -> None:
        """Drop keys with no hits in the current window."""
        if now - self._last_cleanup < self._cleanup_interval:
            return
        self._last_cleanup = now
        window_start = now - self._seconds
        for key in list(self._hits):
            hits = self._hits[key]
            while hits and hits[0] <= window_start:
                hits.popleft()
            if not hits:
                del self._hits[key]

    async def _throttle(self, key: str) -> None:
        async with self._lock:
            now = self._clock()
            self._cleanup_old_keys(now)
            hits = self._hits[key]
            window_start = now - self._seconds
            while hits and hits[0] <= window_start:
                hits.popleft()
            if len(hits) >= self._times:
                retry_after = max(1, int(self._seconds - (now - hits[0]) + 0.999))
                logger.bind(operation="rate_limited", limiter_key=key).warning(
                    "Rate limit exceeded"
                )
                raise HTTPException(
                    status_code=429,
                    detail="Too many requests, please try again later",
                    headers={"Retry-After": str(retry_after)},
                )
            hits.append(now)

    async def cleanup(self) -> None:
        async with self._lock:
            tracked = len(self._hits)
            self._hits.clear()
        logger.debug("Cleaned up local rate limiter with {} tracked keys", tracked)


def build_rate_limiter(config: RateLimiterConfig) -> DefaultLocalRateLimiter | None:
    """Return a limiter for ``config``, or ``None`` when limiting is disabled."""
    if not config.enabled:
        logger.info("Rate limiting disabled")
        return None
    logger.info(
        "Using local in-memory rate limiter: {} requests per {} ms",
        config.requests,
        config.window_ms,
    )
    return DefaultLocalRateLimiter(
        config.requests, config.window_ms, config.per_endpoint, config.per_method
    )


async def rate_limit(request: Request, response: Response) -> None:
    """Dependency enforcing the application's configured quota."""
    limiter: DefaultLocalRateLimiter | None = getattr(
        request.app.state, "rate_limiter", None
    )
    if limiter is not None:
        await limiter(request, response)

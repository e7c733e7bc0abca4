"""Per-client request budgets for the SLA configuration routes.

Two budgets share one sliding window: ``default`` for reads and single-row
writes, and ``bulk`` for the batch, copy and CSV routes, which fan out into
many store writes per request.
"""

from __future__ import annotations

import time
from collections import deque
from threading import Lock
from typing import NamedTuple

from fastapi import Request, Response

from sla_engine.core.config import settings
from sla_engine.core.exceptions import RateLimitExceeded


class RateDecision(NamedTuple):
    allowed: bool
    remaining: int
    retry_after: int


class SlidingWindowLimiter:
    def __init__(self) -> None:
        self._hits: dict[str, deque[float]] = {}
        self._lock = Lock()

    def hit(self, key: str, *, limit: int, window_seconds: int) -> RateDecision:
        if limit <= 0:
            return RateDecision(True, 0, 0)
        now = time.monotonic()
        with self._lock:
            window = self._hits.setdefault(key, deque())
            while window and window[0] <= now - window_seconds:
                window.popleft()
            if len(window) >= limit:
                return RateDecision(False, 0, max(int(window[0] + window_seconds - now), 1))
            window.append(now)
            return RateDecision(True, limit - len(window), 0)

    def clear(self) -> None:
        with self._lock:
            self._hits.clear()


_limiter = SlidingWindowLimiter()


def reset_rate_limits() -> None:
    _limiter.clear()


def scope_budget(scope: str) -> int:
    if scope == "bulk":
        return settings.RATE_LIMIT_BULK_MAX_REQUESTS
    return settings.RATE_LIMIT_MAX_REQUESTS


def rate_limit(scope: str = "default"):
    """Router dependency charging one request to ``scope`` for the calling client."""

    def _dependency(request: Request, response: Response) -> None:
        if not settings.RATE_LIMIT_ENABLED:
            return
        limit = scope_budget(scope)
        window_seconds = settings.RATE_LIMIT_WINDOW_SECONDS
        client = request.client.host if request.client else "unknown"
        decision = _limiter.hit(f"{scope}:{client}", limit=limit, window_seconds=window_seconds)

        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        response.headers["X-RateLimit-Window"] = str(window_seconds)
        if not decision.allowed:
            raise RateLimitExceeded(retry_after=decision.retry_after, limit=limit, window_seconds=window_seconds)

    return _dependency

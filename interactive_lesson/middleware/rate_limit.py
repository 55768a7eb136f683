"""
Per-client request limiting.

``SlidingWindowLimiter`` does the bookkeeping; ``RateLimitMiddleware`` maps
each request to a client key (first ``X-Forwarded-For`` hop behind a proxy,
otherwise the socket peer), answers ``429 rest_too_many_requests`` once the
client is over budget, and reports the budget in ``X-RateLimit-*`` headers.
"""

from __future__ import annotations

import asyncio
import math
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response


class SlidingWindowLimiter:
    """Counts hits per key over the trailing ``window`` seconds. Not thread-safe."""

    def __init__(self, limit: int, window: float) -> None:
        self.limit = max(1, limit)
        self.window = max(1.0, float(window))
        self._hits: Dict[str, Deque[float]] = {}
        self._next_sweep = 0.0

    def hit(self, key: str, now: float) -> Tuple[bool, int, float]:
        """
        Record a hit for ``key`` if it is within budget.

        Returns ``(allowed, remaining, retry_after)``; ``retry_after`` is 0
        when the hit was allowed.
        """
        self._sweep(now)
        hits = self._hits.setdefault(key, deque())
        while hits and hits[0] <= now - self.window:
            hits.popleft()

        if len(hits) >= self.limit:
            return False, 0, hits[0] + self.window - now

        hits.append(now)
        return True, self.limit - len(hits), 0.0

    def _sweep(self, now: float) -> None:
        # Forget clients with no hits inside the current window.
        if now < self._next_sweep:
            return
        for key in [k for k, hits in self._hits.items() if not hits or hits[-1] <= now - self.window]:
            del self._hits[key]
        self._next_sweep = now + self.window


def client_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    first_hop = forwarded.split(",")[0].strip()
    if first_hop:
        return first_hop
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        *,
        requests: int = 120,
        window_seconds: int = 60,
        key_func: Optional[Callable[[Request], str]] = None,
    ):
        super().__init__(app)
        self.limiter = SlidingWindowLimiter(requests, window_seconds)
        self.key_func = key_func or client_key
        self._lock = asyncio.Lock()

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        async with self._lock:
            allowed, remaining, retry_after = self.limiter.hit(
                self.key_func(request), time.monotonic()
            )

        limit = str(self.limiter.limit)
        if not allowed:
            return JSONResponse(
                {
                    "code": "rest_too_many_requests",
                    "message": "Too many requests. Reduce your request rate and try again.",
                    "data": {"status": 429},
                },
                status_code=429,
                headers={
                    "Retry-After": str(max(1, math.ceil(retry_after))),
                    "X-RateLimit-Limit": limit,
                    "X-RateLimit-Remaining": "0",
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = limit
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response

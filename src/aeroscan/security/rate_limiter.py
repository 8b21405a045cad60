"""In-memory token-bucket rate limiting for the OAuth endpoints.

Tiers:
  - oauth:   1 req/s, burst 10  (/oauth/start, /oauth/callback, /oauth/result)
  - refresh: 0.5 req/s, burst 5 (/oauth/refresh)

Buckets are keyed by client IP and guarded by a lock, so the limiter is safe
when handlers run on worker threads.
"""

from __future__ import annotations

import math
import threading
import time
from collections.abc import Callable

from fastapi import Request
from fastapi.responses import JSONResponse

__all__ = [
    "RateLimiter",
    "client_key",
    "oauth_limiter",
    "refresh_limiter",
    "too_many_requests",
]


class RateLimiter:
    """Token bucket per key.

    Parameters
    ----------
    rate : float
        Tokens added per second.
    capacity : int
        Maximum burst size.
    sweep_interval : float
        Seconds between sweeps run from :meth:`acquire`. A sweep drops
        buckets idle for longer than a full refill.
    """

    def __init__(
        self,
        rate: float,
        capacity: int,
        clock: Callable[[], float] | None = None,
        sweep_interval: float = 300.0,
    ):
        self.rate = rate
        self.capacity = capacity
        self.sweep_interval = sweep_interval
        self._clock = clock or time.monotonic
        self._lock = threading.Lock()
        # key -> (tokens, last_refill)
        self._buckets: dict[str, tuple[float, float]] = {}
        self._last_sweep = self._clock()

    @property
    def _refill_seconds(self) -> float:
        return self.capacity / self.rate if self.rate > 0 else float("inf")

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)

    def _drop_idle_locked(self, now: float, max_age: float) -> int:
        stale = [k for k, (_, last) in self._buckets.items() if now - last > max_age]
        for k in stale:
            del self._buckets[k]
        return len(stale)

    def acquire(self, key: str) -> float:
        """Take one token for *key*.

        Returns 0.0 when allowed, otherwise the seconds until a token frees up.
        """
        with self._lock:
            now = self._clock()
            if now - self._last_sweep >= self.sweep_interval:
                self._drop_idle_locked(now, self._refill_seconds)
                self._last_sweep = now
            tokens, last = self._buckets.get(key, (float(self.capacity), now))
            tokens = min(self.capacity, tokens + (now - last) * self.rate)
            if tokens >= 1.0:
                self._buckets[key] = (tokens - 1.0, now)
                return 0.0
            self._buckets[key] = (tokens, now)
            return (1.0 - tokens) / self.rate if self.rate > 0 else 1.0

    def allow(self, key: str) -> bool:
        return self.acquire(key) == 0.0

    def cleanup(self, max_age: float = 3600.0) -> int:
        """Forget buckets idle for more than *max_age* seconds."""
        with self._lock:
            return self._drop_idle_locked(self._clock(), max_age)

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()


def client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def too_many_requests(retry_after: float) -> JSONResponse:
    return JSONResponse(
        status_code=429,
        content={"error": "Too many requests", "code": "rate_limited"},
        headers={"Retry-After": str(max(1, math.ceil(retry_after)))},
    )


oauth_limiter = RateLimiter(rate=1.0, capacity=10)
refresh_limiter = RateLimiter(rate=0.5, capacity=5)

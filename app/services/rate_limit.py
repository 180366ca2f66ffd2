from __future__ import annotations

import threading
from dataclasses import dataclass
from time import monotonic
from typing import Callable, Dict


@dataclass
class _Bucket:
    count: int
    reset_at: float


class RateLimiter:
    """Fixed-window request counter keyed by client address.

    Counters live in memory and reset with the process. A key's window
    starts with its first request and lasts ``window_seconds``.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = monotonic,
    ):
        self.limit = int(limit)
        self.window_seconds = max(1e-6, float(window_seconds))
        self.clock = clock
        self._buckets: Dict[str, _Bucket] = {}
        self._lock = threading.Lock()

    def allow(self, key: str) -> bool:
        """Count one request for ``key``; False once the ceiling is exceeded."""
        now = self.clock()
        with self._lock:
            bucket = self._buckets.get(key)
            if bucket is None or now > bucket.reset_at:
                self._buckets[key] = _Bucket(count=1, reset_at=now + self.window_seconds)
                self._prune(now)
                return self.limit >= 1
            bucket.count += 1
            return bucket.count <= self.limit

    def remaining(self, key: str) -> int:
        now = self.clock()
        with self._lock:
            bucket = self._buckets.get(key)
            if bucket is None or now > bucket.reset_at:
                return self.limit
            return max(0, self.limit - bucket.count)

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()

    def _prune(self, now: float) -> None:
        # Drop expired windows so idle addresses don't accumulate
        expired = [k for k, b in self._buckets.items() if now > b.reset_at]
        for k in expired:
            del self._buckets[k]

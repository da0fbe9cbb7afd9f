from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from threading import Lock
from typing import Callable

# Idle buckets are swept once this many client keys are tracked.
PRUNE_THRESHOLD = 1024


@dataclass
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    retry_after_seconds: int


class RateLimiterService(ABC):
    @abstractmethod
    def check(self, key: str) -> RateLimitDecision:
        """Record one request for ``key`` and say whether it may proceed."""


class SlidingWindowRateLimiter(RateLimiterService):
    """Per-key sliding window kept in process memory.

    Counts are per worker process; several workers each allow ``limit``.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if limit <= 0 or window_seconds <= 0:
            raise ValueError("limit and window_seconds must be positive")
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._buckets: dict[str, deque[float]] = {}
        self._lock = Lock()

    def check(self, key: str) -> RateLimitDecision:
        now = self._clock()
        cutoff = now - self.window_seconds

        with self._lock:
            bucket = self._buckets.setdefault(key, deque())
            while bucket and bucket[0] <= cutoff:
                bucket.popleft()

            if len(bucket) >= self.limit:
                retry_after = max(1, int(round(self.window_seconds - (now - bucket[0]))))
                return RateLimitDecision(allowed=False, limit=self.limit, remaining=0, retry_after_seconds=retry_after)

            bucket.append(now)
            self._drop_idle_keys(cutoff)
            return RateLimitDecision(
                allowed=True,
                limit=self.limit,
                remaining=max(0, self.limit - len(bucket)),
                retry_after_seconds=0,
            )

    def _drop_idle_keys(self, cutoff: float) -> None:
        # Caller holds the lock.
        if len(self._buckets) < PRUNE_THRESHOLD:
            return
        idle = [key for key, bucket in self._buckets.items() if not bucket or bucket[-1] <= cutoff]
        for key in idle:
            del self._buckets[key]

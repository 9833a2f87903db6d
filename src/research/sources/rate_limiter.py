#!/usr/bin/env python3
"""
Token-bucket rate limiting for news sources.

Each source record declares how many requests it allows per period; the
bucket refills continuously at that rate and starts full. Clock and sleep are
injectable so callers (and tests) control time.
"""

import logging
import threading
import time
from typing import Callable, Dict, Optional

from ..exceptions import RateLimitExceededError
from ..models.source import NewsSource, RateLimit

logger = logging.getLogger(__name__)


class TokenBucket:
    """Continuous-refill token bucket."""

    def __init__(self, capacity: float, refill_per_second: float, name: str = "",
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        if capacity <= 0 or refill_per_second <= 0:
            raise ValueError("capacity and refill rate must be positive")
        self.capacity = float(capacity)
        self.refill_per_second = float(refill_per_second)
        self.name = name
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(capacity)
        self._updated = clock()
        self._lock = threading.Lock()

    @classmethod
    def from_rate_limit(cls, rate_limit: RateLimit, name: str = "", **kwargs) -> 'TokenBucket':
        requests = max(1, rate_limit.requests)
        period_seconds = max(1, rate_limit.period_minutes) * 60
        return cls(capacity=requests, refill_per_second=requests / period_seconds, name=name, **kwargs)

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._updated)
        self._tokens = min(self.capacity, self._tokens + elapsed * self.refill_per_second)
        self._updated = now

    @property
    def available(self) -> float:
        with self._lock:
            self._refill()
            return self._tokens

    def try_acquire(self, tokens: float = 1.0) -> float:
        """
        Take tokens if available.

        Returns:
            0.0 on success, otherwise the seconds to wait before enough tokens exist
        """
        with self._lock:
            self._refill()
            if self._tokens >= tokens:
                self._tokens -= tokens
                return 0.0
            return (tokens - self._tokens) / self.refill_per_second

    def acquire(self, tokens: float = 1.0, max_wait: Optional[float] = None) -> None:
        """
        Take tokens, sleeping until they are available.

        Args:
            tokens: Number of tokens to take
            max_wait: Give up instead of waiting longer than this many seconds

        Raises:
            RateLimitExceededError: If the required wait exceeds max_wait
        """
        while True:
            wait = self.try_acquire(tokens)
            if wait <= 0:
                return
            if max_wait is not None and wait > max_wait:
                raise RateLimitExceededError(self.name, retry_after_seconds=int(wait) + 1)
            logger.debug(f"Rate limit reached for {self.name}, waiting {wait:.2f}s")
            self._sleep(wait)


class RateLimiterPool:
    """One bucket per source name, created lazily from the source's rate limit."""

    def __init__(self, clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        self._clock = clock
        self._sleep = sleep
        self._buckets: Dict[str, TokenBucket] = {}
        self._lock = threading.Lock()

    def for_source(self, source: NewsSource) -> TokenBucket:
        with self._lock:
            bucket = self._buckets.get(source.name)
            if bucket is None:
                bucket = TokenBucket.from_rate_limit(
                    source.rate_limit, name=source.name, clock=self._clock, sleep=self._sleep
                )
                self._buckets[source.name] = bucket
            return bucket

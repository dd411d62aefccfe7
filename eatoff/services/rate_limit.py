from __future__ import annotations

import math
from collections import deque
from datetime import datetime, timedelta

from eatoff.utils.time import utc_now


class LoginRateLimiter:
    """Sliding window of login attempts per key (client IP, or the email when the IP is unknown).

    A successful login clears the key, so only consecutive failures count
    against the limit.
    """

    def __init__(self, max_attempts: int, window_seconds: int) -> None:
        self.max_attempts = max_attempts
        self.window = timedelta(seconds=window_seconds)
        self._attempts: dict[str, deque[datetime]] = {}

    def _bucket(self, key: str, now: datetime) -> deque[datetime]:
        bucket = self._attempts.setdefault(key, deque())
        while bucket and now - bucket[0] > self.window:
            bucket.popleft()
        return bucket

    def allow(self, key: str, now: datetime | None = None) -> bool:
        now = now or utc_now()
        bucket = self._bucket(key, now)
        if len(bucket) >= self.max_attempts:
            return False
        bucket.append(now)
        return True

    def retry_after(self, key: str, now: datetime | None = None) -> int:
        """Whole seconds until ``key`` may try again; 0 when it is not blocked."""
        now = now or utc_now()
        bucket = self._bucket(key, now)
        if len(bucket) < self.max_attempts:
            return 0
        remaining = (bucket[0] + self.window - now).total_seconds()
        return max(1, math.ceil(remaining))

    def reset(self, key: str) -> None:
        self._attempts.pop(key, None)

"""
In-Memory Failure Limiter
=========================
Sliding window of failure timestamps per user, for development and testing.
"""

import math
import threading
from collections import deque
from typing import Deque, Dict

from .models import ThrottleInfo


class InMemoryFailureLimiter:
    """
    Sliding-window failure limiter.

    For development and testing only.
    Use RedisFailureLimiter in production.
    """

    def __init__(self, max_failures: int = 5, window: int = 900):
        """
        Args:
            max_failures: Failures allowed inside the window
            window: Window size in seconds
        """
        self.max_failures = max_failures
        self.window = window
        self._failures: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

    def check(self, user_id: str, now: float) -> ThrottleInfo:
        """
        Check whether the user may attempt a validation.

        Args:
            user_id: User identifier
            now: Current Unix timestamp

        Returns:
            ThrottleInfo with decision and failure count
        """
        with self._lock:
            return self._info(self._prune(user_id, now), now)

    def record_failure(self, user_id: str, now: float) -> ThrottleInfo:
        with self._lock:
            failures = self._prune(user_id, now)
            failures.append(now)
            self._failures[user_id] = failures
            return self._info(failures, now)

    def reset(self, user_id: str) -> None:
        with self._lock:
            self._failures.pop(user_id, None)

    def __len__(self) -> int:
        """Users with recorded failures that have not been pruned yet."""
        return len(self._failures)

    def _prune(self, user_id: str, now: float) -> Deque[float]:
        """Drop failures outside the window. Users with none left are forgotten."""
        failures = self._failures.get(user_id)
        if failures is None:
            return deque()
        window_start = now - self.window
        while failures and failures[0] <= window_start:
            failures.popleft()
        if not failures:
            del self._failures[user_id]
        return failures

    def _info(self, failures: Deque[float], now: float) -> ThrottleInfo:
        count = len(failures)
        if count < self.max_failures:
            return ThrottleInfo(allowed=True, failures=count, limit=self.max_failures)

        # Blocked until enough old failures slide out of the window
        oldest_relevant = failures[count - self.max_failures]
        retry_after = max(1, math.ceil(oldest_relevant + self.window - now))
        return ThrottleInfo(
            allowed=False,
            failures=count,
            limit=self.max_failures,
            retry_after=retry_after,
        )

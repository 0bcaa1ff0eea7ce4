"""
Redis Failure Limiter
=====================
Sliding-window failure limiter using Redis sorted sets.
"""

import math
import uuid

import structlog

from .models import ThrottleInfo

logger = structlog.get_logger(__name__)


class RedisFailureLimiter:
    """
    Sliding-window failure limiter using Redis sorted sets.

    Each failure is a member scored by its timestamp.
    """

    def __init__(
        self,
        redis_client,
        max_failures: int = 5,
        window: int = 900,
        key_prefix: str = "otp:failures",
    ):
        self.redis = redis_client
        self.max_failures = max_failures
        self.window = window
        self.key_prefix = key_prefix

    def get_key(self, user_id: str) -> str:
        return f"{self.key_prefix}:{user_id}"

    def check(self, user_id: str, now: float) -> ThrottleInfo:
        """Check using sliding window algorithm."""
        key = self.get_key(user_id)

        # Remove old entries
        self.redis.zremrangebyscore(key, 0, now - self.window)
        count = self.redis.zcard(key)

        if count < self.max_failures:
            return ThrottleInfo(allowed=True, failures=count, limit=self.max_failures)

        # The failure that has to expire before attempts are allowed again
        boundary = self.redis.zrange(
            key,
            count - self.max_failures,
            count - self.max_failures,
            withscores=True,
        )
        retry_after = (
            max(1, math.ceil(float(boundary[0][1]) + self.window - now))
            if boundary else self.window
        )
        logger.warning("OTP failure limit reached", user_id=user_id, failures=count)

        return ThrottleInfo(
            allowed=False,
            failures=count,
            limit=self.max_failures,
            retry_after=retry_after,
        )

    def record_failure(self, user_id: str, now: float) -> ThrottleInfo:
        key = self.get_key(user_id)
        self.redis.zadd(key, {f"{now}:{uuid.uuid4().hex[:8]}": now})
        self.redis.expire(key, self.window * 2)
        return self.check(user_id, now)

    def reset(self, user_id: str) -> None:
        self.redis.delete(self.get_key(user_id))

"""
Failure Limiting
================
Sliding-window throttling of repeated OTP validation failures.
"""

from .models import ThrottleInfo, ThrottleResult, FailureLimiter
from .in_memory import InMemoryFailureLimiter
from .redis_limiter import RedisFailureLimiter

__all__ = [
    # Models
    "ThrottleInfo",
    "ThrottleResult",
    "FailureLimiter",
    # Limiters
    "InMemoryFailureLimiter",
    "RedisFailureLimiter",
]

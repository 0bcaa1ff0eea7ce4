"""
Failure Limiter Models
======================
Data models for throttling repeated OTP failures.
"""

from typing import Optional, Protocol
from dataclasses import dataclass
from enum import Enum


class ThrottleResult(str, Enum):
    """Throttle decision result."""
    ALLOWED = "allowed"
    THROTTLED = "throttled"


@dataclass
class ThrottleInfo:
    """Throttle check result with failure counts."""
    allowed: bool
    failures: int
    limit: int
    retry_after: Optional[int] = None  # Seconds until attempts are accepted again

    @property
    def result(self) -> ThrottleResult:
        return ThrottleResult.ALLOWED if self.allowed else ThrottleResult.THROTTLED


class FailureLimiter(Protocol):
    """Sliding-window counter of failed attempts per user."""

    def check(self, user_id: str, now: float) -> ThrottleInfo:
        ...

    def record_failure(self, user_id: str, now: float) -> ThrottleInfo:
        ...

    def reset(self, user_id: str) -> None:
        ...

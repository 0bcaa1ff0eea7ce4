"""
Replay Window Models
====================
"""

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class ReplayWindowEntry:
    """Most recently consumed time step for a user."""
    user_id: str
    last_step: int
    expires_at: float  # Unix timestamp

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class ReplayStore(Protocol):
    """Per-user consumed-step storage with an atomic conditional advance."""

    def get(self, user_id: str, now: float) -> Optional[int]:
        ...

    def advance(
        self,
        user_id: str,
        expected_step: Optional[int],
        new_step: int,
        ttl_seconds: int,
        now: float,
    ) -> bool:
        """Set ``new_step`` only if the stored step still equals ``expected_step``."""
        ...

    def clear(self, user_id: str) -> None:
        ...

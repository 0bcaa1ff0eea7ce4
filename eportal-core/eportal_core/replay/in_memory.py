"""
In-Memory Replay Store
======================
Consumed-step cache for replay protection.
"""

import threading
from typing import Dict, Optional

import structlog

from .models import ReplayWindowEntry

logger = structlog.get_logger(__name__)


class InMemoryReplayStore:
    """
    In-memory consumed-step cache.

    In production, use RedisReplayStore for multi-instance deployments.
    """

    def __init__(self):
        self._entries: Dict[str, ReplayWindowEntry] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str, now: float) -> Optional[int]:
        with self._lock:
            entry = self._live_entry(user_id, now)
            return entry.last_step if entry else None

    def advance(
        self,
        user_id: str,
        expected_step: Optional[int],
        new_step: int,
        ttl_seconds: int,
        now: float,
    ) -> bool:
        """
        Advance the consumed step if nobody else did first.

        Args:
            user_id: User the step belongs to
            expected_step: Step read before validation (None if none stored)
            new_step: Step just accepted
            ttl_seconds: Lifetime of the entry
            now: Current Unix timestamp

        Returns:
            True if the step was advanced
        """
        with self._lock:
            self._cleanup(now)
            entry = self._entries.get(user_id)
            current = entry.last_step if entry else None

            if current != expected_step:
                logger.warning(
                    "Replay step changed concurrently",
                    user_id=user_id,
                    expected_step=expected_step,
                    current_step=current,
                )
                return False

            self._entries[user_id] = ReplayWindowEntry(
                user_id=user_id,
                last_step=new_step,
                expires_at=now + ttl_seconds,
            )
            return True

    def clear(self, user_id: str) -> None:
        with self._lock:
            self._entries.pop(user_id, None)

    def _live_entry(self, user_id: str, now: float) -> Optional[ReplayWindowEntry]:
        entry = self._entries.get(user_id)
        if entry is not None and entry.is_expired(now):
            del self._entries[user_id]
            return None
        return entry

    def _cleanup(self, now: float) -> None:
        """Remove expired entries."""
        expired = [
            user_id for user_id, entry in self._entries.items()
            if entry.is_expired(now)
        ]
        for user_id in expired:
            del self._entries[user_id]

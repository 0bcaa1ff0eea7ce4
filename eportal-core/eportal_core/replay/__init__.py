"""
Replay Protection
=================
Per-user consumed time steps so an accepted code cannot be used twice.
"""

from .models import ReplayWindowEntry, ReplayStore
from .in_memory import InMemoryReplayStore
from .redis_store import RedisReplayStore, ADVANCE_STEP_SCRIPT

__all__ = [
    # Models
    "ReplayWindowEntry",
    "ReplayStore",
    # Stores
    "InMemoryReplayStore",
    "RedisReplayStore",
    # Scripts
    "ADVANCE_STEP_SCRIPT",
]

"""
Redis Replay Store
==================
Redis-backed consumed-step cache using a Lua script for the atomic advance.
"""

from typing import Optional

import redis
import structlog

logger = structlog.get_logger(__name__)

# Compare-and-set on the stored step; ARGV[1] is "" when no step is expected
ADVANCE_STEP_SCRIPT = """
local key = KEYS[1]
local expected = ARGV[1]
local new_step = ARGV[2]
local ttl = tonumber(ARGV[3])

local current = redis.call('GET', key)

if current == false then
    if expected ~= '' then
        return 0
    end
elseif current ~= expected then
    return 0
end

redis.call('SET', key, new_step, 'EX', ttl)
return 1
"""


class RedisReplayStore:
    """
    Redis-backed replay store.

    Expiry is handled by Redis key TTLs, so ``now`` is only used by
    the in-memory implementation.
    """

    def __init__(self, redis_client, key_prefix: str = "otp:replay"):
        """
        Args:
            redis_client: Synchronous redis.Redis client
            key_prefix: Namespace for replay keys
        """
        self.redis = redis_client
        self.key_prefix = key_prefix
        self._script_sha: Optional[str] = None

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisReplayStore":
        return cls(redis.Redis.from_url(url, decode_responses=True), **kwargs)

    def get_key(self, user_id: str) -> str:
        return f"{self.key_prefix}:{user_id}"

    def _ensure_script(self) -> str:
        """Load Lua script into Redis if needed."""
        if self._script_sha is None:
            self._script_sha = self.redis.script_load(ADVANCE_STEP_SCRIPT)
        return self._script_sha

    def get(self, user_id: str, now: float) -> Optional[int]:
        value = self.redis.get(self.get_key(user_id))
        return int(value) if value is not None else None

    def advance(
        self,
        user_id: str,
        expected_step: Optional[int],
        new_step: int,
        ttl_seconds: int,
        now: float,
    ) -> bool:
        script_sha = self._ensure_script()
        result = self.redis.evalsha(
            script_sha,
            1,
            self.get_key(user_id),
            "" if expected_step is None else str(expected_step),
            str(new_step),
            int(ttl_seconds),
        )
        if not int(result):
            logger.warning("Replay step changed concurrently", user_id=user_id)
            return False
        return True

    def clear(self, user_id: str) -> None:
        self.redis.delete(self.get_key(user_id))

"""
Counter stores for the fixed-window rate limiter
"""
# Standard library imports
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Protocol

# Local imports
from config import settings

logger = logging.getLogger(__name__)


@dataclass
class RateLimitEntry:
    """Request count for one key and the epoch-ms instant its window ends"""
    count: int
    reset_at: int


class RateLimitStore(Protocol):
    async def get(self, key: str) -> Optional[RateLimitEntry]:
        ...

    async def reset(self, key: str, entry: RateLimitEntry) -> None:
        ...

    async def increment(self, key: str) -> int:
        ...

    async def sweep(self, now: int) -> int:
        ...

    async def size(self) -> int:
        ...


class InMemoryRateLimitStore:
    """
    Process-local store.

    None of these coroutines suspend, so a check runs without interleaving under
    a single event loop. Not safe across threads or processes.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, RateLimitEntry] = {}

    async def get(self, key: str) -> Optional[RateLimitEntry]:
        return self._entries.get(key)

    async def reset(self, key: str, entry: RateLimitEntry) -> None:
        self._entries[key] = RateLimitEntry(count=entry.count, reset_at=entry.reset_at)

    async def increment(self, key: str) -> int:
        entry = self._entries[key]
        entry.count += 1
        return entry.count

    async def sweep(self, now: int) -> int:
        """Drop entries whose window has elapsed"""
        expired = [key for key, entry in self._entries.items() if now > entry.reset_at]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.info(f"Rate limit housekeeping removed {len(expired)} expired keys")
        return len(expired)

    async def size(self) -> int:
        return len(self._entries)


class RedisRateLimitStore:
    """
    Shared store for multi-instance deployments.

    Each key is a hash {count, reset_at} that Redis expires at reset_at, so
    sweeping is left to Redis.
    """

    def __init__(self, redis=None, prefix: Optional[str] = None) -> None:
        if redis is None:
            from redis_client import get_redis
            redis = get_redis()
        self._redis = redis
        self._prefix = prefix if prefix is not None else settings.REDIS_KEY_PREFIXES["RATE_LIMIT"]

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> Optional[RateLimitEntry]:
        data = await self._redis.hgetall(self._key(key))
        if not data:
            return None
        data = {
            (k.decode() if isinstance(k, bytes) else k): v
            for k, v in data.items()
        }
        return RateLimitEntry(count=int(data.get("count", 0)), reset_at=int(data.get("reset_at", 0)))

    async def reset(self, key: str, entry: RateLimitEntry) -> None:
        redis_key = self._key(key)
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.delete(redis_key)
            pipe.hset(redis_key, mapping={"count": entry.count, "reset_at": entry.reset_at})
            pipe.pexpireat(redis_key, entry.reset_at)
            await pipe.execute()

    async def increment(self, key: str) -> int:
        return int(await self._redis.hincrby(self._key(key), "count", 1))

    async def sweep(self, now: int) -> int:
        return 0

    async def size(self) -> int:
        return 0

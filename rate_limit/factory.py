from functools import lru_cache

from config import settings
from rate_limit.limiter import CreationRateLimiter, RateLimiter
from rate_limit.store import InMemoryRateLimitStore, RateLimitStore, RedisRateLimitStore


def make_rate_limit_store() -> RateLimitStore:
    """Pick the counter store from RATE_LIMIT_BACKEND"""
    if settings.RATE_LIMIT_BACKEND.lower() == "redis":
        return RedisRateLimitStore()
    return InMemoryRateLimitStore()


@lru_cache(maxsize=1)
def make_creation_rate_limiter() -> CreationRateLimiter:
    """
    Process-wide creation limiter.

    Returns:
        CreationRateLimiter: configured from settings
    """
    limiter = RateLimiter(
        make_rate_limit_store(),
        sweep_threshold=settings.RATE_LIMIT_SWEEP_THRESHOLD,
    )
    return CreationRateLimiter(
        limiter,
        ip_max=settings.RATE_LIMIT_IP_MAX,
        device_max=settings.RATE_LIMIT_DEVICE_MAX,
        window_ms=settings.RATE_LIMIT_WINDOW_MS,
    )

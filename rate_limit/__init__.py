"""
Rate limit package
"""
# Local imports
from .store import RateLimitEntry, RateLimitStore, InMemoryRateLimitStore, RedisRateLimitStore
from .limiter import RateLimiter, RateLimitStatus, CreationRateLimiter, CreationAllowance
from .factory import make_creation_rate_limiter, make_rate_limit_store

__all__ = [
    "RateLimitEntry",
    "RateLimitStore",
    "InMemoryRateLimitStore",
    "RedisRateLimitStore",
    "RateLimiter",
    "RateLimitStatus",
    "CreationRateLimiter",
    "CreationAllowance",
    "make_creation_rate_limiter",
    "make_rate_limit_store",
]

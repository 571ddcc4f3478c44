# Standard library imports
import logging
import threading

# Third-party imports
import redis.asyncio as redis

# Local imports
from config import settings

logger = logging.getLogger(__name__)

# Shared connection pool
_redis_pool = None
_redis_pool_lock = threading.Lock()


def get_redis() -> redis.Redis:
    """Return a Redis client on the shared pool, creating the pool on first use"""
    global _redis_pool

    with _redis_pool_lock:
        if _redis_pool is None:
            logger.info("Creating Redis connection pool...")
            _redis_pool = redis.ConnectionPool.from_url(
                settings.REDIS_URL,
                max_connections=50,
                socket_timeout=5.0,
                socket_connect_timeout=5.0,
                socket_keepalive=True,
                health_check_interval=15,
                retry_on_timeout=True,
                decode_responses=True,
            )
            logger.info("Redis connection pool ready")

        return redis.Redis(connection_pool=_redis_pool)


async def close_redis_pool():
    """Disconnect and forget the shared pool"""
    global _redis_pool

    with _redis_pool_lock:
        pool, _redis_pool = _redis_pool, None
    if pool is not None:
        await pool.disconnect()
        logger.info("Redis connection pool closed")

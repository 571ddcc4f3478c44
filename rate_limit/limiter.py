"""
Fixed-window rate limiting for card creation
"""
# Standard library imports
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

# Local imports
from exceptions import RateLimitExceeded
from rate_limit.store import RateLimitEntry, RateLimitStore

logger = logging.getLogger(__name__)

DEFAULT_SWEEP_THRESHOLD = 10000


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class RateLimitStatus:
    """Outcome of one check; reset_at is epoch milliseconds"""
    allowed: bool
    remaining: int
    reset_at: int
    limit: int


@dataclass
class CreationAllowance:
    """Both dimensions after a successful creation check"""
    ip: RateLimitStatus
    device: RateLimitStatus


class RateLimiter:
    """Fixed-window counter per identifier over a pluggable store"""

    def __init__(
        self,
        store: RateLimitStore,
        sweep_threshold: int = DEFAULT_SWEEP_THRESHOLD,
        clock: Optional[Callable[[], int]] = None,
    ):
        self.store = store
        self.sweep_threshold = sweep_threshold
        self._clock = clock or _now_ms

    async def check(self, identifier: str, max_requests: int, window_ms: int) -> RateLimitStatus:
        """
        Count one request against identifier

        Args:
            identifier: counter key, e.g. "ip:1.2.3.4"
            max_requests: requests allowed per window
            window_ms: window length in milliseconds

        Returns:
            RateLimitStatus; a rejected request does not touch the counter
        """
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")

        now = self._clock()
        entry = await self.store.get(identifier)

        if entry is None or now > entry.reset_at:
            reset_at = now + window_ms
            await self.store.reset(identifier, RateLimitEntry(count=1, reset_at=reset_at))
            if await self.store.size() > self.sweep_threshold:
                await self.store.sweep(now)
            return RateLimitStatus(True, max_requests - 1, reset_at, max_requests)

        if entry.count >= max_requests:
            return RateLimitStatus(False, 0, entry.reset_at, max_requests)

        count = await self.store.increment(identifier)
        if count > max_requests:
            # Lost a race against another instance sharing the store
            return RateLimitStatus(False, 0, entry.reset_at, max_requests)

        return RateLimitStatus(True, max_requests - count, entry.reset_at, max_requests)


class CreationRateLimiter:
    """
    IP and device limits for card creation.

    The device limit is tighter: a device hash approximates one browser, an IP
    may be a whole NAT'd network. IP is checked first.
    """

    def __init__(self, limiter: RateLimiter, ip_max: int, device_max: int, window_ms: int):
        self.limiter = limiter
        self.ip_max = ip_max
        self.device_max = device_max
        self.window_ms = window_ms

    async def check(self, ip: str, device_hash: str) -> CreationAllowance:
        """
        Raises:
            RateLimitExceeded: when either dimension is exhausted
        """
        ip_status = await self.limiter.check(f"ip:{ip}", self.ip_max, self.window_ms)
        if not ip_status.allowed:
            logger.warning("IP rate limit exceeded")
            raise RateLimitExceeded("ip", self.ip_max, ip_status.reset_at)

        device_status = await self.limiter.check(f"device:{device_hash}", self.device_max, self.window_ms)
        if not device_status.allowed:
            logger.warning("Device rate limit exceeded")
            raise RateLimitExceeded("device", self.device_max, device_status.reset_at)

        return CreationAllowance(ip=ip_status, device=device_status)

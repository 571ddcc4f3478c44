"""
Retry policy for calls to the generative AI service
"""
# Standard library imports
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, TypeVar

# Third-party imports
import openai

# Local imports
from exceptions import HolidayCardError, UpstreamUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")

NON_RETRYABLE_MARKERS = (
    "permission",
    "authentication",
    "invalid",
    "api key",
    "not found",
    "not supported",
)


class ErrorKind(Enum):
    FATAL = "fatal"
    OVERLOADED = "overloaded"
    TRANSIENT = "transient"


@dataclass
class RetryPolicy:
    """Attempt budget and exponential backoff bounds, in milliseconds"""
    max_attempts: int = 3
    base_delay_ms: int = 1000
    max_delay_ms: int = 10000
    overloaded_base_delay_ms: int = 2000
    overloaded_max_delay_ms: int = 30000


def classify_error(exc: BaseException) -> ErrorKind:
    """
    Decide whether a failed call is worth repeating

    Our own errors (content blocked, misconfiguration, bad payload) are final.
    4xx responses are final except 429. 503 and "overloaded" get the longer
    backoff. Everything else is treated as transient.
    """
    if isinstance(exc, HolidayCardError):
        return ErrorKind.FATAL

    status = getattr(exc, "status_code", None)
    message = str(exc).lower()

    if status == 503 or "503" in message or "overloaded" in message:
        return ErrorKind.OVERLOADED
    if status == 429:
        return ErrorKind.TRANSIENT
    if isinstance(status, int) and 400 <= status < 500:
        return ErrorKind.FATAL
    if isinstance(exc, openai.APIConnectionError):
        return ErrorKind.TRANSIENT
    if any(marker in message for marker in NON_RETRYABLE_MARKERS):
        return ErrorKind.FATAL
    if "400" in message and "429" not in message:
        return ErrorKind.FATAL
    return ErrorKind.TRANSIENT


def backoff_delay_ms(kind: ErrorKind, attempt: int, policy: RetryPolicy) -> int:
    """Delay after the given (1-based) failed attempt"""
    if kind is ErrorKind.OVERLOADED:
        base, cap = policy.overloaded_base_delay_ms, policy.overloaded_max_delay_ms
    else:
        base, cap = policy.base_delay_ms, policy.max_delay_ms
    return min(base * 2 ** (attempt - 1), cap)


async def call_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    label: str,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Run operation until it succeeds, fails fatally or the budget runs out

    Args:
        operation: zero-argument coroutine factory, called once per attempt
        policy: attempt budget and backoff
        label: what is being done, for logs and the terminal error
        sleep: awaited between attempts with the delay in seconds

    Returns:
        the operation's result

    Raises:
        the original exception when it is fatal;
        UpstreamUnavailable once every attempt has failed
    """
    last_error = None

    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await operation()
        except Exception as e:
            kind = classify_error(e)
            if kind is ErrorKind.FATAL:
                raise
            last_error = e

            if attempt < policy.max_attempts:
                delay = backoff_delay_ms(kind, attempt, policy)
                logger.warning(
                    f"Retrying {label} (attempt {attempt + 1}/{policy.max_attempts}) "
                    f"after {delay}ms: {str(e)}"
                )
                await sleep(delay / 1000)

    logger.error(f"Failed to {label} after {policy.max_attempts} attempts: {last_error}")
    raise UpstreamUnavailable(
        cause=f"Failed to {label} after {policy.max_attempts} attempts: {last_error}"
    )

"""
Error translation for routes
"""
# Standard library imports
import logging
import math
import time
from typing import Dict

# Third-party imports
from fastapi import HTTPException

# Local imports
from exceptions import ConfigurationError, HolidayCardError, RateLimitExceeded
from rate_limit import CreationAllowance

logger = logging.getLogger(__name__)

_DIMENSION_HEADER = {"ip": "IP", "device": "Device"}


def _dimension_headers(dimension: str, limit: int, remaining: int, reset_at: int) -> Dict[str, str]:
    name = _DIMENSION_HEADER[dimension]
    return {
        f"X-RateLimit-{name}-Limit": str(limit),
        f"X-RateLimit-{name}-Remaining": str(remaining),
        f"X-RateLimit-{name}-Reset": str(reset_at),
    }


def rate_limit_headers(allowance: CreationAllowance) -> Dict[str, str]:
    """X-RateLimit-* headers for both dimensions of a successful creation"""
    headers = {}
    for dimension, status in (("ip", allowance.ip), ("device", allowance.device)):
        headers.update(_dimension_headers(dimension, status.limit, status.remaining, status.reset_at))
    return headers


def to_http_exception(error: HolidayCardError) -> HTTPException:
    """
    Turn a pipeline error into the HTTP response the client sees

    Args:
        error: any HolidayCardError

    Returns:
        HTTPException with the error's status, JSON detail and headers
    """
    headers = None

    if isinstance(error, RateLimitExceeded):
        retry_after = max(1, math.ceil((error.reset_at - int(time.time() * 1000)) / 1000))
        headers = {"Retry-After": str(retry_after)}
        headers.update(_dimension_headers(error.dimension, error.limit, error.remaining, error.reset_at))
    elif isinstance(error, ConfigurationError):
        logger.error(f"Configuration error: {str(error)}")
    elif error.status_code >= 500:
        logger.error(f"{error.code}: {str(error)}")
    else:
        logger.info(f"{error.code}: {str(error)}")

    return HTTPException(status_code=error.status_code, detail=error.to_detail(), headers=headers)

"""
Utils layer
"""

from .clock import utcnow, calculate_expiration
from .slug import generate_slug
from .request_identity import (
    generate_creator_hash,
    get_device_identifier,
    get_caller_info,
    resolve_base_url,
)

__all__ = [
    "utcnow",
    "calculate_expiration",
    "generate_slug",
    "generate_creator_hash",
    "get_device_identifier",
    "get_caller_info",
    "resolve_base_url",
]

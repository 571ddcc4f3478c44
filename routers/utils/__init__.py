"""
Route helpers
"""

from .errors import to_http_exception, rate_limit_headers

__all__ = ["to_http_exception", "rate_limit_headers"]

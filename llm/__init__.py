"""
LLM package
OpenAI-compatible client plus the retrying card generation client
"""

from .client import LLMClient
from .generation import GenerationClient
from .retry import RetryPolicy, ErrorKind, classify_error, call_with_retry

__all__ = [
    "LLMClient",
    "GenerationClient",
    "RetryPolicy",
    "ErrorKind",
    "classify_error",
    "call_with_retry",
]

"""
Services layer
"""

from .card_service import CardService, CreatedCard, PublishedCard
from .cleanup_service import CleanupService, CleanupResult

__all__ = [
    "CardService",
    "CreatedCard",
    "PublishedCard",
    "CleanupService",
    "CleanupResult",
]

"""
Storage repositories package.
"""
# Local imports
from .base import BaseRepository
from .card_repository import CardRepository
from .occasion_repository import OccasionRepository

__all__ = [
    "BaseRepository",
    "CardRepository",
    "OccasionRepository",
]

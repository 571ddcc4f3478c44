"""
Storage models package.
"""
# Local imports
from .occasion import Occasion
from .card import Card

__all__ = [
    "Occasion",
    "Card",
]

"""
Moderation package
Pre-filters visitor messages before they reach the text model
"""
# Local imports
from .messages import ModerationReason, moderation_error_message
from .filter import (
    HeuristicModerator,
    Moderator,
    ModerationVerdict,
    moderate,
    scrub_pii,
    mentions_public_figure,
)

__all__ = [
    "ModerationReason",
    "moderation_error_message",
    "HeuristicModerator",
    "Moderator",
    "ModerationVerdict",
    "moderate",
    "scrub_pii",
    "mentions_public_figure",
]

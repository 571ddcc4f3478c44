"""
Moderation reasons and the visitor-facing text for each of them
"""
# Standard library imports
from enum import Enum
from typing import Dict


class ModerationReason(str, Enum):
    """Why a message was rejected. Values keep the stable wording used in logs."""

    INAPPROPRIATE = "Content contains inappropriate language or threats"
    DEFAMATORY = "Content contains potentially defamatory statements about private individuals"
    CRIMINAL_ACCUSATION = "Content contains unsubstantiated criminal accusations"
    TOO_SHORT = "Message is too short"
    TOO_LONG = "Message is too long (max 5000 characters)"


_MESSAGES: Dict[ModerationReason, str] = {
    ModerationReason.INAPPROPRIATE: "Your message contains inappropriate language. Please revise and try again.",
    ModerationReason.DEFAMATORY: "Your message contains content that cannot be published. Please revise and try again.",
    ModerationReason.CRIMINAL_ACCUSATION: "Your message contains unsubstantiated criminal accusations. Please revise and try again.",
    ModerationReason.TOO_SHORT: "Your message is too short. Please write a longer message.",
    ModerationReason.TOO_LONG: "Your message is too long. Please keep it under 5000 characters.",
}


def moderation_error_message(reason: ModerationReason) -> str:
    """Map a rejection reason to text that can be shown to the visitor verbatim"""
    return _MESSAGES[reason]

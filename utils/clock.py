"""
Clock helpers
Timestamps are stored as naive UTC
"""
# Standard library imports
from datetime import datetime, timedelta, timezone

# Local imports
from config import settings


def utcnow() -> datetime:
    """Current time as naive UTC"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def calculate_expiration(created_at: datetime, days: int = None) -> datetime:
    """
    Expiry instant for a card created at created_at

    Args:
        created_at: creation time
        days: retention window, CARD_EXPIRATION_DAYS when None
    """
    days = settings.CARD_EXPIRATION_DAYS if days is None else days
    if days < 1:
        raise ValueError("retention window must be at least one day")
    return created_at + timedelta(days=days)

"""
Error taxonomy for the card pipeline

Every error carries an HTTP status, a stable code and a message that is safe
to show to the visitor. ``cause`` holds operator-facing detail for logs and is
never sent to the client. Routes turn these into HTTPException responses.
"""
# Standard library imports
from typing import Optional, Dict, Any

# Local imports
from moderation.messages import ModerationReason, moderation_error_message


class HolidayCardError(Exception):
    """Base class for all expected pipeline failures"""

    status_code: int = 500
    code: str = "internal_error"
    default_message: str = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None, cause: Optional[str] = None):
        self.message = message or self.default_message
        self.cause = cause
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.cause or self.message

    def to_detail(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message}


class ValidationError(HolidayCardError):
    status_code = 400
    code = "validation_error"
    default_message = "Invalid request."


class RateLimitExceeded(HolidayCardError):
    """Either the IP or the device window is exhausted"""

    status_code = 429
    code = "rate_limit_exceeded"

    def __init__(self, dimension: str, limit: int, reset_at: int, remaining: int = 0):
        self.dimension = dimension
        self.limit = limit
        self.remaining = remaining
        self.reset_at = reset_at
        source = "this IP" if dimension == "ip" else "this device"
        super().__init__(f"Too many cards created from {source}. Please try again later.")

    def to_detail(self) -> Dict[str, Any]:
        detail = super().to_detail()
        detail.update({
            "limit": self.dimension,
            "remaining": self.remaining,
            "reset_at": self.reset_at,
        })
        return detail


class ModerationBlocked(HolidayCardError):
    status_code = 400
    code = "moderation_failed"

    def __init__(self, reason: ModerationReason):
        self.reason = reason
        super().__init__(moderation_error_message(reason), cause=reason.value)

    def to_detail(self) -> Dict[str, Any]:
        detail = super().to_detail()
        detail["reason"] = self.reason.name.lower()
        return detail


class UpstreamContentBlocked(HolidayCardError):
    """The text model refused the message"""

    status_code = 400
    code = "moderation_failed"
    default_message = "Your message could not be processed. Please revise and try again."


class UpstreamUnavailable(HolidayCardError):
    """Retries against the AI service were exhausted"""

    status_code = 503
    code = "service_unavailable"
    default_message = "AI service is temporarily overloaded. Please try again in a few moments."


class GenerationFailed(HolidayCardError):
    status_code = 502
    code = "generation_failed"
    default_message = "We couldn't generate your card right now. Please try again."


class ConfigurationError(HolidayCardError):
    """Missing or rejected credentials, bucket or API key. Meant for operators."""

    status_code = 500
    code = "configuration_error"
    default_message = "The service is misconfigured. Please try again later."


class StorageError(HolidayCardError):
    status_code = 502
    code = "storage_error"
    default_message = "We couldn't save your card image. Please try again."


class NotFound(HolidayCardError):
    status_code = 404
    code = "not_found"
    default_message = "Card not found."


class CardExpired(HolidayCardError):
    status_code = 410
    code = "card_expired"
    default_message = "This card has expired."


class AlreadyPublished(HolidayCardError):
    status_code = 400
    code = "already_published"
    default_message = "Cannot modify published card."


class Unauthorized(HolidayCardError):
    status_code = 401
    code = "unauthorized"
    default_message = "Unauthorized."

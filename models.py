"""
Data model definitions
"""
# Standard library imports
from enum import Enum
from typing import Optional, List, Dict, Any
from datetime import datetime

# Third-party imports
from pydantic import BaseModel, Field


class Vibe(str, Enum):
    """Emotional tone of a card"""
    WARM = "warm"
    FUNNY = "funny"
    FANCY = "fancy"
    CHAOTIC = "chaotic"


class CardStatus(str, Enum):
    """draft -> published, one way"""
    DRAFT = "draft"
    PUBLISHED = "published"


VIBES = [vibe.value for vibe in Vibe]


# ========== Card requests ==========

class CreateCardRequest(BaseModel):
    """Create card request; fields are validated by the card service"""
    occasion: Optional[str] = Field(None, description="Occasion id, e.g. christmas")
    vibe: Optional[str] = Field(None, description="warm/funny/fancy/chaotic")
    message: Optional[str] = Field(None, description="Free text, up to 5000 characters")


class RegenerateMessageRequest(BaseModel):
    """Regenerate message request"""
    original_message: Optional[str] = Field(
        None,
        alias="originalMessage",
        description="Text to rewrite; the stored original is used when omitted",
    )

    model_config = {"populate_by_name": True}


# ========== Card responses ==========

class RateLimitInfo(BaseModel):
    """Remaining quota for one dimension"""
    limit: int
    remaining: int
    reset_at: int = Field(..., description="Window end, epoch milliseconds")


class CardRateLimits(BaseModel):
    ip: RateLimitInfo
    device: RateLimitInfo


class CardResponse(BaseModel):
    """Card response"""
    id: str
    slug: str
    occasion: str
    vibe: str
    clean_message: str
    cover_image_url: str
    status: str
    created_at: Optional[datetime] = None
    expires_at: datetime


class CreateCardResponse(BaseModel):
    success: bool = True
    message: str = "Card created"
    data: CardResponse
    rate_limit: CardRateLimits


class PublishCardResponse(BaseModel):
    id: str
    slug: str
    deep_link: str
    status: str = CardStatus.PUBLISHED.value


class RegenerateCoverResponse(BaseModel):
    cover_image_url: str


class RegenerateMessageResponse(BaseModel):
    clean_message: str


class CardViewResponse(BaseModel):
    """Shared card, as seen through its link"""
    id: str
    slug: str
    occasion: str
    occasion_name: str
    vibe: str
    clean_message: str
    cover_image_url: str
    status: str
    expires_at: datetime
    style_guide: Dict[str, Any] = Field(default_factory=dict)
    font_set: List[str] = Field(default_factory=list)


# ========== Occasions ==========

class OccasionResponse(BaseModel):
    id: str
    name: str


# ========== Cleanup ==========

class CleanupErrorDetail(BaseModel):
    card_id: str
    error: str


class CleanupSummary(BaseModel):
    total_expired: int
    deleted: int
    errors: int
    error_details: List[CleanupErrorDetail] = Field(default_factory=list)
    duration_ms: int


class CleanupResponse(BaseModel):
    success: bool = True
    result: CleanupSummary


# ========== Caller ==========

class CallerInfo(BaseModel):
    """Who is calling, as far as headers tell"""
    ip: str = "unknown"
    user_agent: str = "unknown"
    base_url: str

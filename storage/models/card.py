"""
Card model - one holiday card and its share link
"""
# Standard library imports
import uuid
from datetime import datetime
from typing import Optional

# Third-party imports
from sqlalchemy import String, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

# Local imports
from models import CardStatus
from storage.database import Base
from utils.clock import utcnow


class Card(Base):
    """Cards table"""

    __tablename__ = "cards"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    slug: Mapped[str] = mapped_column(String(32), nullable=False, unique=True, comment="Share token")
    occasion_id: Mapped[str] = mapped_column(String(255), ForeignKey("occasions.id"), nullable=False)
    vibe: Mapped[str] = mapped_column(String(50), nullable=False, comment="warm/funny/fancy/chaotic")
    original_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="Moderated input before rewrite")
    clean_message: Mapped[str] = mapped_column(String(5000), nullable=False, comment="AI rewritten message")
    cover_image_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    theme_version: Mapped[str] = mapped_column(String(50), nullable=False, default="1.0")
    status: Mapped[str] = mapped_column(String(50), nullable=False, default=CardStatus.DRAFT.value, comment="draft/published")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    creator_hash: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    occasion: Mapped["Occasion"] = relationship("Occasion", back_populates="cards")

    __table_args__ = (
        Index("idx_cards_occasion_slug", "occasion_id", "slug"),
    )

    @property
    def is_published(self) -> bool:
        return self.status == CardStatus.PUBLISHED.value

    def __repr__(self):
        return f"<Card(id={self.id}, slug={self.slug}, status={self.status})>"

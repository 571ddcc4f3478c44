"""
Occasion model - reference data, seeded by scripts/init_occasions.py
"""
# Standard library imports
from datetime import datetime

# Third-party imports
from sqlalchemy import String, Boolean, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship

# Local imports
from storage.database import Base
from utils.clock import utcnow


class Occasion(Base):
    """Occasions table"""

    __tablename__ = "occasions"

    id: Mapped[str] = mapped_column(String(255), primary_key=True, comment="Slug-like id, e.g. christmas")
    name: Mapped[str] = mapped_column(String(255), nullable=False, comment="Display name")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, comment="Selectable for new cards")
    style_guide: Mapped[dict] = mapped_column(JSON, nullable=False, comment="Palette, motifs, tone")
    font_set: Mapped[list] = mapped_column(JSON, nullable=False, comment="Font families")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    cards: Mapped[list["Card"]] = relationship("Card", back_populates="occasion")

    def __repr__(self):
        return f"<Occasion(id={self.id}, name={self.name}, is_active={self.is_active})>"

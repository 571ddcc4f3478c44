"""
CardRepository
"""
# Standard library imports
from datetime import datetime
from typing import Optional, List

# Third-party imports
from sqlalchemy import select, update, and_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

# Local imports
from models import CardStatus
from storage.models.card import Card
from storage.repositories.base import BaseRepository


class CardRepository(BaseRepository[Card]):
    """Cards repository"""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Card)

    async def get_by_slug(self, slug: str) -> Optional[Card]:
        result = await self.session.execute(
            select(Card).where(Card.slug == slug)
        )
        return result.scalar_one_or_none()

    async def slug_exists(self, slug: str) -> bool:
        return await self.exists(slug=slug)

    async def get_by_occasion_and_slug(self, occasion_id: str, slug: str) -> Optional[Card]:
        """
        Look a card up by its share link, occasion loaded

        Args:
            occasion_id: occasion part of the link
            slug: slug part of the link

        Returns:
            the card or None
        """
        result = await self.session.execute(
            select(Card)
            .options(selectinload(Card.occasion))
            .where(and_(Card.occasion_id == occasion_id, Card.slug == slug))
        )
        return result.scalar_one_or_none()

    async def update_draft(self, card_id: str, **values) -> Optional[Card]:
        """
        Update a card only while it is still a draft

        The status check is part of the UPDATE, so a publish committed after
        the card was read makes this a no-op.

        Returns:
            the refreshed card, or None when no draft row matched
        """
        result = await self.session.execute(
            update(Card)
            .where(and_(Card.id == card_id, Card.status == CardStatus.DRAFT.value))
            .values(**values)
        )
        if result.rowcount == 0:
            return None

        await self.session.flush()
        card = await self.get_by_id(card_id)
        if card is not None:
            await self.session.refresh(card)
        return card

    async def list_expired(self, now: datetime, limit: Optional[int] = None) -> List[Card]:
        """
        Cards whose expires_at is before now, oldest first

        Args:
            now: naive UTC reference time
            limit: max cards
        """
        return await self.query_by_filters(
            filters={"expires_at": {"lt": now}},
            limit=limit,
            order_by="expires_at"
        )

    async def delete_card(self, card_id: str) -> bool:
        """
        Delete a card inside a SAVEPOINT

        A failure rolls back only this delete, so the caller's transaction
        stays usable for the next card.
        """
        async with self.session.begin_nested():
            return await self.delete_by_id(card_id)

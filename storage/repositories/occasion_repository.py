"""
OccasionRepository
"""
# Standard library imports
from typing import Optional, List

# Third-party imports
from sqlalchemy.ext.asyncio import AsyncSession

# Local imports
from storage.models.occasion import Occasion
from storage.repositories.base import BaseRepository


class OccasionRepository(BaseRepository[Occasion]):
    """Occasions repository"""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Occasion)

    async def list_active(self) -> List[Occasion]:
        """Active occasions ordered by name"""
        return await self.query_by_filters(
            filters={"is_active": True},
            order_by="name"
        )

    async def get_active(self, occasion_id: str) -> Optional[Occasion]:
        """The occasion if it exists and is active"""
        occasion = await self.get_by_id(occasion_id)
        if occasion is None or not occasion.is_active:
            return None
        return occasion

    async def upsert(self, occasion_id: str, **fields) -> Occasion:
        """Insert or update one occasion, used by the seed script"""
        existing = await self.get_by_id(occasion_id)
        if existing:
            return await self.update_by_id(occasion_id, **fields)
        return await self.create(id=occasion_id, **fields)

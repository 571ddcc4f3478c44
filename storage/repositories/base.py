"""
Base repository
"""
# Standard library imports
from typing import TypeVar, Generic, Optional, List, Dict, Any
from abc import ABC

# Third-party imports
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, and_
from sqlalchemy.sql import func

# Local imports
from storage.database import Base

ModelType = TypeVar('ModelType', bound=Base)


class BaseRepository(Generic[ModelType], ABC):
    """Common CRUD operations"""

    def __init__(self, session: AsyncSession, model: type[ModelType]):
        """
        Args:
            session: database session
            model: mapped model class
        """
        self.session = session
        self.model = model

    async def get_by_id(self, id) -> Optional[ModelType]:
        """
        Fetch one row by primary key

        Returns:
            model instance or None
        """
        result = await self.session.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def create(self, **kwargs) -> ModelType:
        """
        Insert a row

        Args:
            **kwargs: column values

        Returns:
            the created instance, refreshed from the database
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def update_by_id(self, id, **kwargs) -> Optional[ModelType]:
        """
        Update a row by primary key

        Returns:
            the updated instance, or None when the row does not exist
        """
        # MySQL has no RETURNING, update then re-read
        existing = await self.get_by_id(id)
        if not existing:
            return None

        await self.session.execute(
            update(self.model)
            .where(self.model.id == id)
            .values(**kwargs)
        )
        await self.session.flush()

        updated_instance = await self.get_by_id(id)
        if updated_instance:
            await self.session.refresh(updated_instance)

        return updated_instance

    async def delete_by_id(self, id) -> bool:
        """
        Delete a row by primary key

        Returns:
            whether a row was deleted
        """
        result = await self.session.execute(
            delete(self.model).where(self.model.id == id)
        )
        return result.rowcount > 0

    async def count(self, **filters) -> int:
        """Count rows matching equality filters"""
        query = select(func.count(self.model.id))
        conditions = self._build_filter_conditions(filters)
        if conditions:
            query = query.where(and_(*conditions))

        result = await self.session.execute(query)
        return result.scalar_one()

    async def exists(self, **filters) -> bool:
        count = await self.count(**filters)
        return count > 0

    def _build_filter_conditions(self, filters: Dict[str, Any]) -> List:
        """
        Translate a filter dict into SQL conditions

        A scalar value means equality; {"lt": value} means strictly before.
        """
        conditions = []

        for key, value in filters.items():
            column = getattr(self.model, key)
            if isinstance(value, dict):
                conditions.append(column < value["lt"])
            else:
                conditions.append(column == value)

        return conditions

    async def query_by_filters(
        self,
        filters: Dict[str, Any],
        limit: Optional[int] = None,
        order_by: Optional[str] = None
    ) -> List[ModelType]:
        """
        Query rows by filters

        Args:
            filters: see _build_filter_conditions
            limit: max rows
            order_by: column name, ascending

        Returns:
            matching instances
        """
        conditions = self._build_filter_conditions(filters)
        query = select(self.model)

        if conditions:
            query = query.where(and_(*conditions))

        if order_by and hasattr(self.model, order_by):
            query = query.order_by(getattr(self.model, order_by).asc())

        if limit:
            query = query.limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

"""Base repository with windowed, newest-first queries."""

from datetime import datetime
from typing import Any, Generic, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from observatory.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository for append-only observability tables.

    Subclasses set ``timestamp_column`` to the column used for windowing
    and ordering.
    """

    timestamp_column: str = "created_at"

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        """Initialize repository with model and session."""
        self.model = model
        self.session = session

    async def get_by_id(self, id: int) -> ModelType | None:
        """Get entity by ID."""
        stmt = select(self.model).where(self.model.id == id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, **data: Any) -> ModelType:
        """Insert a new row and return it with generated fields populated."""
        instance = self.model(**data)
        self.session.add(instance)
        await self.session.commit()
        await self.session.refresh(instance)
        return instance

    async def list_recent(
        self,
        since: datetime | None = None,
        limit: int = 100,
        **filters: Any,
    ) -> list[ModelType]:
        """List rows newest first, optionally bounded to ``since``.

        Ties on the timestamp are broken by id so ordering is stable.

        Args:
            since: Only rows at or after this time
            limit: Maximum rows to return
            **filters: Equality filters on model columns; None values are skipped
        """
        ts = getattr(self.model, self.timestamp_column)
        stmt = select(self.model)

        if since is not None:
            stmt = stmt.where(ts >= since)

        for key, value in filters.items():
            if value is not None and hasattr(self.model, key):
                stmt = stmt.where(getattr(self.model, key) == value)

        stmt = stmt.order_by(ts.desc(), self.model.id.desc()).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

"""Service health record repository."""

from sqlalchemy.ext.asyncio import AsyncSession

from observatory.persistence.models.service_health import ServiceHealthRecord
from observatory.persistence.repositories.base import BaseRepository


class ServiceHealthRepository(BaseRepository[ServiceHealthRecord]):
    """Repository for the append-only service health log."""

    timestamp_column = "checked_at"

    def __init__(self, session: AsyncSession):
        """Initialize service health repository."""
        super().__init__(ServiceHealthRecord, session)

    async def add_many(self, records: list[ServiceHealthRecord]) -> list[ServiceHealthRecord]:
        """Insert several records in one transaction."""
        self.session.add_all(records)
        await self.session.commit()
        for record in records:
            await self.session.refresh(record)
        return records

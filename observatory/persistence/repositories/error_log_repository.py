"""Error log repository."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from observatory.persistence.models.error_log import ErrorLog
from observatory.persistence.repositories.base import BaseRepository


class ErrorLogRepository(BaseRepository[ErrorLog]):
    """Repository for error log entries."""

    def __init__(self, session: AsyncSession):
        """Initialize error log repository."""
        super().__init__(ErrorLog, session)

    async def count_by_hash(self, error_hash: str) -> int:
        """Count every stored occurrence of one error fingerprint."""
        stmt = select(func.count()).select_from(ErrorLog).where(ErrorLog.error_hash == error_hash)
        result = await self.session.execute(stmt)
        return result.scalar() or 0

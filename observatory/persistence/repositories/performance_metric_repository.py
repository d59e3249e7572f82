"""Performance metric repository."""

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from observatory.persistence.models.performance_metric import PerformanceMetric
from observatory.persistence.repositories.base import BaseRepository


class PerformanceMetricRepository(BaseRepository[PerformanceMetric]):
    """Repository for performance metrics."""

    timestamp_column = "recorded_at"

    def __init__(self, session: AsyncSession):
        """Initialize performance metric repository."""
        super().__init__(PerformanceMetric, session)

    async def average_since(
        self,
        metric_name: str,
        since: datetime,
        service_name: str | None = None,
    ) -> tuple[float | None, int]:
        """Get the mean value and sample count of a metric since a point in time.

        Returns:
            (mean, count); mean is None when there are no samples
        """
        stmt = select(func.avg(PerformanceMetric.value), func.count()).where(
            PerformanceMetric.metric_name == metric_name,
            PerformanceMetric.recorded_at >= since,
        )
        if service_name:
            stmt = stmt.where(PerformanceMetric.service_name == service_name)

        result = await self.session.execute(stmt)
        mean, count = result.one()
        return (float(mean) if mean is not None else None), int(count or 0)

"""Daily uptime rollup repository."""

from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from observatory.persistence.models.uptime_daily import UptimeDaily


class UptimeRepository:
    """Read access to uptime_daily.

    Note: This repository does not extend BaseRepository because rows are
    keyed by calendar date rather than a timestamp, and are written by an
    external rollup job.
    """

    def __init__(self, session: AsyncSession):
        """Initialize uptime repository."""
        self.session = session

    async def list_since(
        self,
        start_date: date,
        service_name: str | None = None,
    ) -> list[UptimeDaily]:
        """List daily rows on or after ``start_date``, newest date first."""
        stmt = select(UptimeDaily).where(UptimeDaily.date >= start_date)
        if service_name:
            stmt = stmt.where(UptimeDaily.service_name == service_name)
        stmt = stmt.order_by(UptimeDaily.date.desc(), UptimeDaily.service_name)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

"""Uptime rollup queries."""

from dataclasses import dataclass, field
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from observatory.core.time_windows import TimeRange, resolve_window_start
from observatory.persistence.models.uptime_daily import UptimeDaily
from observatory.persistence.repositories.uptime_repository import UptimeRepository


@dataclass
class UptimeSummary:
    rows: list[UptimeDaily] = field(default_factory=list)
    overall_uptime: float = 100.0


def average_uptime(rows: list[UptimeDaily]) -> float:
    """Average uptime across daily rows, reading a missing percent as 100.

    Returns 100 for an empty list.
    """
    if not rows:
        return 100.0
    total = sum(r.uptime_percent if r.uptime_percent is not None else 100.0 for r in rows)
    return round(total / len(rows), 2)


class UptimeService:
    """Service for reading daily uptime rollups."""

    def __init__(self, session: AsyncSession) -> None:
        self.repo = UptimeRepository(session)

    async def query(
        self,
        time_range: str | TimeRange | None = None,
        service_name: str | None = None,
    ) -> UptimeSummary:
        """Get daily rows from the window's start date onward, newest first."""
        start_date: date = resolve_window_start(time_range).date()
        rows = await self.repo.list_since(start_date, service_name=service_name or None)
        return UptimeSummary(rows=rows, overall_uptime=average_uptime(rows))

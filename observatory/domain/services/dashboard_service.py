"""Dashboard aggregator.

Composes health, recent errors, active incidents, and uptime into one
read-only snapshot. The four sub-queries are independent, so each runs on
its own session and they are awaited together under a single overall
timeout.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from observatory.core.errors import StoreFailure
from observatory.core.time_windows import TimeRange, resolve_window_start, utcnow
from observatory.domain.services.health_service import HealthService, HealthSnapshot
from observatory.domain.services.uptime_service import average_uptime
from observatory.persistence.models.alert import AlertIncident
from observatory.persistence.models.error_log import ErrorLog
from observatory.persistence.models.uptime_daily import UptimeDaily
from observatory.persistence.repositories.alert_repository import AlertIncidentRepository
from observatory.persistence.repositories.error_log_repository import ErrorLogRepository
from observatory.persistence.repositories.uptime_repository import UptimeRepository
from observatory.settings import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class DashboardSnapshot:
    health: HealthSnapshot
    recent_errors: list[ErrorLog] = field(default_factory=list)
    active_incidents: list[AlertIncident] = field(default_factory=list)
    uptime_rows: list[UptimeDaily] = field(default_factory=list)

    @property
    def uptime_average(self) -> float:
        return average_uptime(self.uptime_rows)


class DashboardService:
    """Builds dashboard snapshots from independent concurrent reads."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        timeout_seconds: float | None = None,
        health_sample_limit: int | None = None,
        error_sample_limit: int | None = None,
        uptime_days: int | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.timeout_seconds = timeout_seconds or settings.dashboard_timeout_seconds
        self.health_sample_limit = health_sample_limit or settings.dashboard_health_sample_limit
        self.error_sample_limit = error_sample_limit or settings.dashboard_error_sample_limit
        self.uptime_days = uptime_days or settings.uptime_rollup_days

    async def _read(self, query: Callable[[AsyncSession], Awaitable[T]]) -> T:
        async with self.session_factory() as session:
            return await query(session)

    async def snapshot(self, time_range: str | TimeRange | None = None) -> DashboardSnapshot:
        """Compose a snapshot for the window.

        Raises:
            StoreFailure: If the reads do not finish within the overall timeout
        """
        now = utcnow()
        errors_since = resolve_window_start(time_range, now)
        uptime_since = (now - timedelta(days=self.uptime_days)).date()

        tasks = [
            asyncio.create_task(
                self._read(lambda s: HealthService(s).latest_per_service(self.health_sample_limit))
            ),
            asyncio.create_task(
                self._read(
                    lambda s: ErrorLogRepository(s).list_recent(
                        since=errors_since, limit=self.error_sample_limit
                    )
                )
            ),
            asyncio.create_task(self._read(lambda s: AlertIncidentRepository(s).list_active())),
            asyncio.create_task(self._read(lambda s: UptimeRepository(s).list_since(uptime_since))),
        ]

        try:
            health, errors, incidents, uptime = await asyncio.wait_for(
                asyncio.gather(*tasks), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.error(f"Dashboard snapshot timed out after {self.timeout_seconds:g}s")
            raise StoreFailure("Dashboard query timed out")
        finally:
            # One failed read must not leave the others running on their sessions
            pending = [t for t in tasks if not t.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        return DashboardSnapshot(
            health=health,
            recent_errors=errors,
            active_incidents=incidents,
            uptime_rows=uptime,
        )

"""Health recorder: persists probe results and reports latest status per service."""

import logging
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from observatory.domain.services.probe_runner import ProbeResult, ProbeRunner
from observatory.persistence.models.service_health import HealthStatus, ServiceHealthRecord
from observatory.persistence.repositories.service_health_repository import ServiceHealthRepository
from observatory.settings import settings

logger = logging.getLogger(__name__)


@dataclass
class HealthSnapshot:
    """Latest known record per service plus the aggregate status."""

    services: list[ServiceHealthRecord] = field(default_factory=list)

    @property
    def healthy_count(self) -> int:
        return sum(1 for s in self.services if s.status == HealthStatus.HEALTHY.value)

    @property
    def total(self) -> int:
        return len(self.services)

    @property
    def overall(self) -> str:
        """healthy only when every sampled service's latest record is healthy."""
        if self.healthy_count == self.total:
            return HealthStatus.HEALTHY.value
        return HealthStatus.DEGRADED.value


def _record_fields(result: ProbeResult) -> dict:
    # last_healthy_at / last_unhealthy_at are mutually exclusive; degraded sets neither
    return {
        "service_name": result.service_name,
        "service_url": result.service_url,
        "service_type": result.service_type,
        "status": result.status.value,
        "status_code": result.status_code,
        "response_time_ms": result.response_time_ms,
        "error_message": result.error_message,
        "checked_at": result.checked_at,
        "last_healthy_at": result.checked_at if result.status == HealthStatus.HEALTHY else None,
        "last_unhealthy_at": result.checked_at if result.status == HealthStatus.UNHEALTHY else None,
    }


def build_health_record(result: ProbeResult) -> ServiceHealthRecord:
    """Convert a probe result into an unsaved health record."""
    return ServiceHealthRecord(**_record_fields(result))


def latest_by_service(records: list[ServiceHealthRecord]) -> list[ServiceHealthRecord]:
    """Keep the newest record per service from a newest-first list."""
    latest: dict[str, ServiceHealthRecord] = {}
    for record in records:
        if record.service_name not in latest:
            latest[record.service_name] = record
    return list(latest.values())


class HealthService:
    """Write-once log of service health."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize health service."""
        self.repo = ServiceHealthRepository(session)

    async def record(self, result: ProbeResult) -> ServiceHealthRecord:
        """Append one health record for a probe result."""
        return await self.repo.create(**_record_fields(result))

    async def record_all(self, results: list[ProbeResult]) -> list[ServiceHealthRecord]:
        """Append one health record per probe result in a single transaction."""
        if not results:
            return []
        return await self.repo.add_many([build_health_record(r) for r in results])

    async def latest_per_service(self, sample_limit: int | None = None) -> HealthSnapshot:
        """Get the latest record for each service seen in the most recent sample.

        Grouping happens over the newest ``sample_limit`` records only, so a
        service with no record in that sample is absent from the snapshot.
        """
        if sample_limit is None:
            sample_limit = settings.health_sample_limit
        records = await self.repo.list_recent(limit=sample_limit)
        return HealthSnapshot(services=latest_by_service(records))

    async def run_health_check(self, runner: ProbeRunner) -> list[ProbeResult]:
        """Probe all configured targets and record every result."""
        results = await runner.run_all()
        await self.record_all(results)
        return results

"""Tests for uptime rollups and the dashboard aggregator."""

import asyncio
from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from observatory.core.errors import StoreFailure
from observatory.core.time_windows import utcnow
from observatory.domain.services.dashboard_service import DashboardService
from observatory.domain.services.error_log_service import ErrorLogService
from observatory.domain.services.health_service import HealthService
from observatory.domain.services.incident_service import IncidentService
from observatory.domain.services.probe_runner import ProbeResult
from observatory.domain.services.uptime_service import UptimeService, average_uptime
from observatory.persistence.models.service_health import HealthStatus
from observatory.persistence.models.uptime_daily import UptimeDaily


def probe_result(name: str, status: HealthStatus) -> ProbeResult:
    return ProbeResult(
        service_name=name,
        service_url=f"https://{name}.example.test/",
        service_type="website",
        status=status,
        status_code=200 if status == HealthStatus.HEALTHY else 503,
        response_time_ms=20,
        error_message=None,
        checked_at=utcnow(),
    )


async def add_uptime(session, rows):
    today = utcnow().date()
    for service_name, days_ago, percent in rows:
        session.add(
            UptimeDaily(
                service_name=service_name,
                date=today - timedelta(days=days_ago),
                uptime_percent=percent,
            )
        )
    await session.commit()


def test_average_uptime():
    assert average_uptime([]) == 100.0
    assert average_uptime([UptimeDaily(uptime_percent=99.0), UptimeDaily(uptime_percent=None)]) == 99.5
    assert average_uptime([UptimeDaily(uptime_percent=0.0)]) == 0.0
    assert average_uptime([UptimeDaily(uptime_percent=v) for v in (99.9, 99.8, 99.95)]) == 99.88


class TestUptimeService:
    async def test_query_window_and_service(self, db_session):
        await add_uptime(
            db_session,
            [("web", 0, 100.0), ("web", 3, 90.0), ("web", 20, 50.0), ("db", 1, 99.0)],
        )

        summary = await UptimeService(db_session).query("7d", service_name="web")

        assert [r.uptime_percent for r in summary.rows] == [100.0, 90.0]
        assert summary.overall_uptime == 95.0

    async def test_no_rows_reports_full_uptime(self, db_session):
        summary = await UptimeService(db_session).query("30d")

        assert summary.rows == []
        assert summary.overall_uptime == 100.0


class TestDashboardService:
    async def test_snapshot_composes_all_sections(self, db_session, session_factory):
        await HealthService(db_session).record_all(
            [probe_result("web", HealthStatus.HEALTHY), probe_result("api", HealthStatus.UNHEALTHY)]
        )
        for i in range(12):
            await ErrorLogService(db_session).log_error("api", "Timeout", f"attempt {i}")
        incidents = IncidentService(db_session)
        open_incident = await incidents.trigger(rule_name="High latency", severity="critical")
        closed = await incidents.trigger(rule_name="Disk", severity="info")
        await incidents.transition(closed.id, "resolved")
        await add_uptime(db_session, [("web", 1, 99.0), ("web", 30, 10.0)])

        snapshot = await DashboardService(session_factory).snapshot("24h")

        assert snapshot.health.total == 2
        assert snapshot.health.healthy_count == 1
        assert snapshot.health.overall == "degraded"
        assert len(snapshot.recent_errors) == 10
        assert snapshot.recent_errors[0].error_message == "attempt 11"
        assert [i.id for i in snapshot.active_incidents] == [open_incident.id]
        assert [r.uptime_percent for r in snapshot.uptime_rows] == [99.0]
        assert snapshot.uptime_average == 99.0

    async def test_snapshot_is_read_only(self, db_session, session_factory):
        await HealthService(db_session).record(probe_result("web", HealthStatus.HEALTHY))
        await ErrorLogService(db_session).log_error("api", "Timeout", "boom")
        service = DashboardService(session_factory)

        first = await service.snapshot()
        second = await service.snapshot()

        assert [s.id for s in first.health.services] == [s.id for s in second.health.services]
        assert [e.id for e in first.recent_errors] == [e.id for e in second.recent_errors]
        assert first.active_incidents == second.active_incidents == []

    async def test_empty_store(self, session_factory):
        snapshot = await DashboardService(session_factory).snapshot()

        assert snapshot.health.services == []
        assert snapshot.health.overall == "healthy"
        assert snapshot.recent_errors == []
        assert snapshot.uptime_average == 100.0

    async def test_timeout_raises_store_failure(self, session_factory, monkeypatch):
        service = DashboardService(session_factory, timeout_seconds=0.05)
        real_read = service._read

        async def slow_read(query):
            await asyncio.sleep(1)
            return await real_read(query)

        monkeypatch.setattr(service, "_read", slow_read)

        with pytest.raises(StoreFailure, match="timed out"):
            await service.snapshot()

    async def test_failed_read_cancels_the_others(self, session_factory, monkeypatch):
        service = DashboardService(session_factory, timeout_seconds=10)
        started = []
        cancelled = []

        async def failing_read(query):
            started.append(query)
            if len(started) == 1:
                await asyncio.sleep(0)
                raise OperationalError("SELECT", {}, Exception("connection reset"))
            try:
                await asyncio.sleep(5)
            except asyncio.CancelledError:
                cancelled.append(query)
                raise

        monkeypatch.setattr(service, "_read", failing_read)

        with pytest.raises(OperationalError):
            await service.snapshot()

        assert len(started) == 4
        assert len(cancelled) == 3

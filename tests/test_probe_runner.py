"""Tests for the probe runner."""

import asyncio

import httpx
import pytest

from observatory.domain.services.probe_runner import ProbeRunner, classify_status_code
from observatory.persistence.models.service_health import HealthStatus
from observatory.settings import ServiceTarget

TEST_TARGETS = [
    ServiceTarget(name="web", url="https://web.example.test/", service_type="website"),
    ServiceTarget(name="db", url="https://db.example.test/rest/v1/", service_type="database"),
    ServiceTarget(name="api", url="https://api.example.test/status", service_type="api"),
]


def make_runner(handler, targets=TEST_TARGETS, **kwargs) -> ProbeRunner:
    kwargs.setdefault("timeout_seconds", 1.0)
    return ProbeRunner(targets, transport=httpx.MockTransport(handler), **kwargs)


@pytest.mark.parametrize(
    "code,expected",
    [
        (200, HealthStatus.HEALTHY),
        (204, HealthStatus.HEALTHY),
        (301, HealthStatus.DEGRADED),
        (404, HealthStatus.DEGRADED),
        (429, HealthStatus.DEGRADED),
        (500, HealthStatus.UNHEALTHY),
        (503, HealthStatus.UNHEALTHY),
    ],
)
def test_classify_status_code(code, expected):
    assert classify_status_code(code) == expected


class TestProbe:
    """Tests for single-target probes."""

    async def test_uses_head_request(self):
        seen = []

        def handler(request):
            seen.append(request.method)
            return httpx.Response(200)

        result = await make_runner(handler).probe(TEST_TARGETS[0])

        assert seen == ["HEAD"]
        assert result.status == HealthStatus.HEALTHY
        assert result.status_code == 200
        assert result.error_message is None
        assert result.response_time_ms >= 0

    async def test_server_error_is_unhealthy(self):
        result = await make_runner(lambda r: httpx.Response(502)).probe(TEST_TARGETS[0])

        assert result.status == HealthStatus.UNHEALTHY
        assert result.status_code == 502
        assert result.error_message is None

    async def test_redirect_is_degraded_not_followed(self):
        def handler(request):
            return httpx.Response(302, headers={"Location": "https://elsewhere.example.test/"})

        result = await make_runner(handler).probe(TEST_TARGETS[0])

        assert result.status == HealthStatus.DEGRADED
        assert result.status_code == 302

    async def test_connection_error_is_unhealthy_with_message(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        result = await make_runner(handler).probe(TEST_TARGETS[0])

        assert result.status == HealthStatus.UNHEALTHY
        assert result.status_code == 0
        assert result.error_message == "connection refused"

    async def test_timeout_is_unhealthy_and_bounded(self):
        """A probe that never answers is cut off at the timeout."""

        async def handler(request):
            await asyncio.sleep(5)
            return httpx.Response(200)

        runner = make_runner(handler, timeout_seconds=0.05)
        result = await runner.probe(TEST_TARGETS[0])

        assert result.status == HealthStatus.UNHEALTHY
        assert result.response_time_ms >= 50
        assert result.response_time_ms < 5000
        assert "timed out" in result.error_message

    async def test_httpx_timeout_is_reported_as_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        result = await make_runner(handler, timeout_seconds=10).probe(TEST_TARGETS[0])

        assert result.status == HealthStatus.UNHEALTHY
        assert result.error_message == "Probe timed out after 10s"
        assert result.response_time_ms >= 10000

    async def test_result_carries_target_fields(self):
        target = ServiceTarget(name="db", url="https://db.example.test/", service_type="database")
        result = await make_runner(lambda r: httpx.Response(200), targets=[target]).probe(target)

        assert result.service_name == "db"
        assert result.service_url == "https://db.example.test/"
        assert result.service_type == "database"


class TestRunAll:
    """Tests for probing every target."""

    async def test_one_result_per_target_in_order(self):
        def handler(request):
            if request.url.host == "db.example.test":
                raise httpx.ConnectError("dns failure", request=request)
            if request.url.host == "api.example.test":
                return httpx.Response(503)
            return httpx.Response(200)

        results = await make_runner(handler).run_all()

        assert [r.service_name for r in results] == ["web", "db", "api"]
        assert [r.status for r in results] == [
            HealthStatus.HEALTHY,
            HealthStatus.UNHEALTHY,
            HealthStatus.UNHEALTHY,
        ]
        assert results[1].error_message == "dns failure"

    async def test_unexpected_exception_does_not_abort_run(self):
        def handler(request):
            if request.url.host == "web.example.test":
                raise RuntimeError("boom")
            return httpx.Response(200)

        results = await make_runner(handler).run_all()

        assert len(results) == len(TEST_TARGETS)
        assert results[0].status == HealthStatus.UNHEALTHY
        assert results[0].error_message == "boom"
        assert all(r.status == HealthStatus.HEALTHY for r in results[1:])

    async def test_slow_probe_does_not_block_others(self):
        """Probes run concurrently: total time tracks the slowest probe, not the sum."""

        async def handler(request):
            await asyncio.sleep(0.2)
            return httpx.Response(200)

        loop = asyncio.get_running_loop()
        started = loop.time()
        results = await make_runner(handler).run_all()
        elapsed = loop.time() - started

        assert len(results) == 3
        assert elapsed < 0.55

    async def test_concurrency_limit_is_respected(self):
        in_flight = 0
        peak = 0

        async def handler(request):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.02)
            in_flight -= 1
            return httpx.Response(200)

        results = await make_runner(handler, max_concurrency=1).run_all()

        assert len(results) == 3
        assert peak == 1

    async def test_explicit_targets_override_configured(self):
        extra = [ServiceTarget(name="only", url="https://only.example.test/")]
        results = await make_runner(lambda r: httpx.Response(200)).run_all(extra)

        assert [r.service_name for r in results] == ["only"]

    async def test_no_targets(self):
        assert await make_runner(lambda r: httpx.Response(200), targets=[]).run_all() == []

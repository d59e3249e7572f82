"""Probe runner for service reachability checks.

Each probe is a HEAD request bounded by its own timeout. Probes run
concurrently and a failing target never stops the others: every failure
is captured on that target's ProbeResult.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

import httpx

from observatory.core.time_windows import utcnow
from observatory.persistence.models.service_health import HealthStatus
from observatory.settings import ServiceTarget

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT_SECONDS = 10.0


@dataclass
class ProbeResult:
    """Outcome of one probe against one service target."""

    service_name: str
    service_url: str
    service_type: str
    status: HealthStatus
    status_code: int
    response_time_ms: int
    error_message: str | None
    checked_at: datetime


def classify_status_code(status_code: int) -> HealthStatus:
    """Map an HTTP status code to a health status.

    2xx is healthy, 5xx is unhealthy, anything else (redirects, client
    errors) is degraded.
    """
    if 200 <= status_code < 300:
        return HealthStatus.HEALTHY
    if status_code >= 500:
        return HealthStatus.UNHEALTHY
    return HealthStatus.DEGRADED


class ProbeRunner:
    """Runs health probes against a list of service targets."""

    def __init__(
        self,
        targets: Sequence[ServiceTarget],
        timeout_seconds: float = DEFAULT_PROBE_TIMEOUT_SECONDS,
        max_concurrency: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        user_agent: str | None = None,
    ) -> None:
        """Initialize the probe runner.

        Args:
            targets: Services to probe on each run
            timeout_seconds: Independent timeout for each probe
            max_concurrency: Probes in flight at once; defaults to one per target
            transport: Optional httpx transport, used to fake the network in tests
            user_agent: Optional User-Agent header for probe requests
        """
        self.targets = list(targets)
        self.timeout_seconds = timeout_seconds
        self.max_concurrency = max_concurrency
        self._transport = transport
        self._headers = {"User-Agent": user_agent} if user_agent else {}

    def _get_client(self) -> httpx.AsyncClient:
        """Create an HTTP client for one probe run."""
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout_seconds),
            follow_redirects=False,
            headers=self._headers,
            transport=self._transport,
        )

    async def run_all(self, targets: Sequence[ServiceTarget] | None = None) -> list[ProbeResult]:
        """Probe every target concurrently.

        Returns:
            Exactly one result per target, in target order
        """
        targets = list(self.targets if targets is None else targets)
        if not targets:
            return []

        workers = self.max_concurrency or len(targets)
        semaphore = asyncio.Semaphore(max(1, workers))

        async with self._get_client() as client:

            async def bounded_probe(target: ServiceTarget) -> ProbeResult:
                async with semaphore:
                    return await self.probe(target, client)

            results = await asyncio.gather(*(bounded_probe(t) for t in targets))

        unhealthy = sum(1 for r in results if r.status != HealthStatus.HEALTHY)
        logger.info(
            f"Probe run complete: {len(results)} targets, {unhealthy} not healthy",
            extra={"targets": len(results), "not_healthy": unhealthy},
        )
        return list(results)

    async def probe(
        self,
        target: ServiceTarget,
        client: httpx.AsyncClient | None = None,
    ) -> ProbeResult:
        """Probe one target and classify the outcome.

        Never raises for network failures; they are returned as an
        unhealthy result with the failure reason in error_message.
        """
        if client is None:
            async with self._get_client() as own_client:
                return await self.probe(target, own_client)

        status_code = 0
        error_message: str | None = None
        timed_out = False
        started = time.monotonic()

        try:
            response = await asyncio.wait_for(
                client.head(target.url),
                timeout=self.timeout_seconds,
            )
            status_code = response.status_code
            status = classify_status_code(status_code)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            timed_out = True
            status = HealthStatus.UNHEALTHY
            error_message = f"Probe timed out after {self.timeout_seconds:g}s"
        except Exception as e:
            status = HealthStatus.UNHEALTHY
            error_message = str(e) or type(e).__name__

        response_time_ms = int((time.monotonic() - started) * 1000)
        if timed_out:
            # Timer resolution can fire a hair early
            response_time_ms = max(response_time_ms, int(self.timeout_seconds * 1000))

        if error_message:
            logger.warning(
                f"Probe failed for {target.name}: {error_message}",
                extra={"service_name": target.name, "response_time_ms": response_time_ms},
            )

        return ProbeResult(
            service_name=target.name,
            service_url=target.url,
            service_type=target.service_type,
            status=status,
            status_code=status_code,
            response_time_ms=response_time_ms,
            error_message=error_message,
            checked_at=utcnow(),
        )

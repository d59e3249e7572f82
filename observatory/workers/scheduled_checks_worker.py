"""Scheduled check worker endpoints.

Called on a fixed interval by an external cron scheduler. A failed run is
not retried here; the next scheduled run covers it.
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from observatory.api.deps import get_db, get_probe_runner
from observatory.domain.services.health_service import HealthService
from observatory.domain.services.probe_runner import ProbeRunner
from observatory.domain.services.rule_evaluator import RuleEvaluator
from observatory.persistence.models.service_health import HealthStatus

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/health-check")
async def run_health_check_task(
    db: Annotated[AsyncSession, Depends(get_db)],
    runner: Annotated[ProbeRunner, Depends(get_probe_runner)],
) -> dict[str, Any]:
    """Probe every configured service and record the results."""
    results = await HealthService(db).run_health_check(runner)

    summary = {status.value: 0 for status in HealthStatus}
    for result in results:
        summary[result.status.value] += 1

    logger.info(
        f"Scheduled health check complete: {len(results)} services checked",
        extra=summary,
    )
    return {"checked": len(results), **summary}


@router.post("/evaluate-alert-rules")
async def evaluate_alert_rules_task(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict[str, Any]:
    """Evaluate active alert rules against recent metrics."""
    evaluations = await RuleEvaluator(db).evaluate_all()
    triggered = [e.incident_id for e in evaluations if e.outcome == "triggered"]
    return {"evaluated": len(evaluations), "triggered": len(triggered), "incident_ids": triggered}

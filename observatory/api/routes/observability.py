"""Observability API routes.

GET selects a read view with ``?action=``; POST selects a write with an
``action`` key in the JSON body; PATCH transitions an alert incident.
"""

import logging
from typing import Annotated, Any, TypeVar

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from observatory.api.deps import get_db, get_probe_runner, get_sessionmaker
from observatory.api.schemas.observability import (
    AlertIncidentResponse,
    AlertRuleResponse,
    AlertsResponse,
    CreateRuleRequest,
    DashboardAlerts,
    DashboardErrors,
    DashboardHealth,
    DashboardResponse,
    DashboardUptime,
    ErrorListResponse,
    ErrorLogResponse,
    EvaluateRulesResponse,
    HealthCheckResponse,
    HealthResponse,
    LogErrorRequest,
    LogErrorResponse,
    MetricListResponse,
    PerformanceMetricResponse,
    ProbeResultResponse,
    RecordMetricRequest,
    RecordMetricResponse,
    RuleEvaluationResponse,
    RuleResponse,
    ServiceHealthResponse,
    SetRuleActiveRequest,
    TriggerAlertRequest,
    TriggerAlertResponse,
    UpdateIncidentRequest,
    UpdateIncidentResponse,
    UptimeDailyResponse,
    UptimeResponse,
)
from observatory.core.errors import ValidationError
from observatory.core.time_windows import utcnow
from observatory.domain.services.dashboard_service import DashboardService
from observatory.domain.services.error_log_service import ErrorLogService
from observatory.domain.services.health_service import HealthService
from observatory.domain.services.incident_service import IncidentService
from observatory.domain.services.metric_service import MetricService
from observatory.domain.services.probe_runner import ProbeRunner
from observatory.domain.services.rule_evaluator import RuleEvaluator
from observatory.domain.services.uptime_service import UptimeService

logger = logging.getLogger(__name__)

router = APIRouter()

GET_ACTIONS = ("health", "errors", "metrics", "alerts", "uptime", "dashboard")
POST_ACTIONS = (
    "health-check",
    "log-error",
    "record-metric",
    "trigger-alert",
    "create-rule",
    "set-rule-active",
    "evaluate-rules",
)

RequestModel = TypeVar("RequestModel", bound=BaseModel)


def _parse(model: type[RequestModel], body: dict[str, Any]) -> RequestModel:
    """Validate a request body, reporting problems as a ValidationError."""
    try:
        return model.model_validate(body)
    except PydanticValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}" for err in e.errors()
        )
        raise ValidationError(f"Invalid request body: {problems}")


async def _read_json_body(request: Request) -> dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        raise ValidationError("Request body must be valid JSON")
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


# ============================================================
# GET: read views
# ============================================================


@router.get("", response_model=None)
async def get_observability(
    db: Annotated[AsyncSession, Depends(get_db)],
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_sessionmaker)],
    action: str | None = None,
    service: str | None = None,
    time_range: Annotated[str | None, Query(alias="range")] = None,
    limit: str | None = None,
) -> BaseModel:
    """Fetch observability data for the dashboard layer."""
    if action == "health":
        snapshot = await HealthService(db).latest_per_service()
        return HealthResponse(
            services=[ServiceHealthResponse.model_validate(s) for s in snapshot.services],
            overall=snapshot.overall,
        )

    if action == "errors":
        result = await ErrorLogService(db).query(time_range, service, limit)
        return ErrorListResponse(
            errors=[ErrorLogResponse.model_validate(e) for e in result.errors],
            counts=result.counts,
            total=result.total,
        )

    if action == "metrics":
        metrics = await MetricService(db).query(time_range, service, limit)
        return MetricListResponse(
            metrics=[PerformanceMetricResponse.model_validate(m) for m in metrics],
            total=len(metrics),
        )

    if action == "alerts":
        incidents_service = IncidentService(db)
        incidents = await incidents_service.active_incidents()
        rules = await incidents_service.active_rules()
        return AlertsResponse(
            active_incidents=[AlertIncidentResponse.model_validate(i) for i in incidents],
            rules=[AlertRuleResponse.model_validate(r) for r in rules],
            alert_count=len(incidents),
        )

    if action == "uptime":
        summary = await UptimeService(db).query(time_range, service)
        return UptimeResponse(
            uptime=[UptimeDailyResponse.model_validate(u) for u in summary.rows],
            overall_uptime=summary.overall_uptime,
        )

    if action == "dashboard":
        snapshot = await DashboardService(session_factory).snapshot(time_range)
        return DashboardResponse(
            health=DashboardHealth(
                services=[ServiceHealthResponse.model_validate(s) for s in snapshot.health.services],
                healthy=snapshot.health.healthy_count,
                total=snapshot.health.total,
                status=snapshot.health.overall,
            ),
            errors=DashboardErrors(
                recent=[ErrorLogResponse.model_validate(e) for e in snapshot.recent_errors],
                count=len(snapshot.recent_errors),
            ),
            alerts=DashboardAlerts(
                active=[AlertIncidentResponse.model_validate(i) for i in snapshot.active_incidents],
                count=len(snapshot.active_incidents),
            ),
            uptime=DashboardUptime(
                data=[UptimeDailyResponse.model_validate(u) for u in snapshot.uptime_rows],
                average=snapshot.uptime_average,
            ),
        )

    raise ValidationError(f"Invalid action. Use: {', '.join(GET_ACTIONS)}")


# ============================================================
# POST: record observability data
# ============================================================


@router.post("", response_model=None)
async def post_observability(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    runner: Annotated[ProbeRunner, Depends(get_probe_runner)],
) -> BaseModel:
    """Record probe results, errors, metrics, and alerts."""
    body = await _read_json_body(request)
    action = body.get("action")

    if action == "health-check":
        results = await HealthService(db).run_health_check(runner)
        return HealthCheckResponse(
            results=[
                ProbeResultResponse(
                    service=r.service_name,
                    status=r.status.value,
                    response_time=r.response_time_ms,
                    status_code=r.status_code,
                    error_message=r.error_message,
                )
                for r in results
            ],
            timestamp=utcnow(),
        )

    if action == "log-error":
        payload = _parse(LogErrorRequest, body)
        errors_service = ErrorLogService(db)
        entry = await errors_service.log_error(
            service_name=payload.service_name,
            error_type=payload.error_type,
            error_message=payload.error_message,
            stack_trace=payload.stack_trace,
            endpoint=payload.endpoint,
            user_id=payload.user_id,
            request_id=payload.request_id,
            user_impact=payload.user_impact,
        )
        return LogErrorResponse(
            error_id=entry.id,
            error_hash=entry.error_hash,
            occurrences=await errors_service.occurrences(entry.error_hash),
        )

    if action == "record-metric":
        payload = _parse(RecordMetricRequest, body)
        metric = await MetricService(db).record(
            metric_name=payload.metric_name,
            value=payload.value,
            service_name=payload.service_name,
            metric_type=payload.metric_type,
            unit=payload.unit,
            endpoint=payload.endpoint,
            tags=payload.tags,
        )
        return RecordMetricResponse(metric_id=metric.id)

    if action == "trigger-alert":
        payload = _parse(TriggerAlertRequest, body)
        incident = await IncidentService(db).trigger(
            rule_name=payload.rule_name,
            severity=payload.severity,
            rule_id=payload.rule_id,
            triggered_value=payload.triggered_value,
            threshold_value=payload.threshold_value,
            condition=payload.condition,
            service_name=payload.service_name,
            endpoint=payload.endpoint,
        )
        return TriggerAlertResponse(incident_id=incident.id)

    if action == "create-rule":
        payload = _parse(CreateRuleRequest, body)
        rule = await IncidentService(db).create_rule(
            name=payload.name,
            severity=payload.severity,
            metric_name=payload.metric_name,
            service_name=payload.service_name,
            condition=payload.condition,
            threshold_value=payload.threshold_value,
            window=payload.window,
            is_active=payload.is_active,
        )
        return RuleResponse(rule=AlertRuleResponse.model_validate(rule))

    if action == "set-rule-active":
        payload = _parse(SetRuleActiveRequest, body)
        if payload.rule_id is None or payload.is_active is None:
            raise ValidationError("ruleId and isActive required")
        rule = await IncidentService(db).set_rule_active(payload.rule_id, payload.is_active)
        return RuleResponse(rule=AlertRuleResponse.model_validate(rule))

    if action == "evaluate-rules":
        evaluations = await RuleEvaluator(db).evaluate_all()
        return EvaluateRulesResponse(
            evaluations=[RuleEvaluationResponse.model_validate(e) for e in evaluations],
            triggered=sum(1 for e in evaluations if e.outcome == "triggered"),
        )

    raise ValidationError(f"Invalid action. Use: {', '.join(POST_ACTIONS)}")


# ============================================================
# PATCH: incident lifecycle
# ============================================================


@router.patch("", response_model=UpdateIncidentResponse)
async def update_incident(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UpdateIncidentResponse:
    """Acknowledge or resolve an alert incident.

    Callers historically send resolvedBy for both acknowledgement and
    resolution, so either field names the actor.
    """
    payload = _parse(UpdateIncidentRequest, await _read_json_body(request))
    if payload.incident_id is None or not payload.status:
        raise ValidationError("incidentId and status required")

    if payload.status == "acknowledged":
        actor = payload.acknowledged_by or payload.resolved_by
    else:
        actor = payload.resolved_by or payload.acknowledged_by

    incident = await IncidentService(db).transition(
        payload.incident_id,
        payload.status,
        actor=actor,
        notes=payload.resolution_notes,
    )
    return UpdateIncidentResponse(incident=AlertIncidentResponse.model_validate(incident))

"""Pydantic schemas for the observability endpoints.

Request bodies and top-level response keys are camelCase; stored rows are
returned with their snake_case column names.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Requests ---

class LogErrorRequest(CamelModel):
    service_name: str | None = None
    error_type: str | None = None
    error_message: str | None = None
    stack_trace: str | None = None
    endpoint: str | None = None
    user_id: str | None = None
    request_id: str | None = None
    user_impact: str | None = None


class RecordMetricRequest(CamelModel):
    metric_name: str | None = None
    value: StrictInt | StrictFloat | None = None
    service_name: str | None = None
    metric_type: str | None = None
    unit: str | None = None
    endpoint: str | None = None
    tags: dict[str, str | int | float | bool] | None = None


class TriggerAlertRequest(CamelModel):
    rule_id: int | None = None
    rule_name: str | None = None
    severity: str | None = None
    triggered_value: float | None = None
    threshold_value: float | None = None
    condition: str | None = None
    service_name: str | None = None
    endpoint: str | None = None


class CreateRuleRequest(CamelModel):
    name: str | None = None
    severity: str | None = None
    metric_name: str | None = None
    service_name: str | None = None
    condition: str | None = None
    threshold_value: float | None = None
    window: str | None = None
    is_active: bool = True


class SetRuleActiveRequest(CamelModel):
    rule_id: int | None = None
    is_active: bool | None = None


class UpdateIncidentRequest(CamelModel):
    incident_id: int | None = None
    status: str | None = None
    acknowledged_by: str | None = None
    resolved_by: str | None = None
    resolution_notes: str | None = None


# --- Stored rows ---

class ServiceHealthResponse(BaseModel):
    id: int
    service_name: str
    service_url: str
    service_type: str
    status: str
    status_code: int
    response_time_ms: int
    error_message: str | None
    checked_at: datetime
    last_healthy_at: datetime | None
    last_unhealthy_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class ErrorLogResponse(BaseModel):
    id: int
    service_name: str
    error_type: str
    error_message: str
    stack_trace: str | None
    endpoint: str | None
    user_id: str | None
    request_id: str | None
    error_hash: str
    user_impact: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PerformanceMetricResponse(BaseModel):
    id: int
    metric_name: str
    metric_type: str
    value: float
    unit: str | None
    service_name: str
    endpoint: str | None
    tags: dict[str, str]
    recorded_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AlertRuleResponse(BaseModel):
    id: int
    name: str
    is_active: bool
    metric_name: str | None
    service_name: str | None
    condition: str | None
    threshold_value: float | None
    severity: str
    window: str
    last_triggered_at: datetime | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AlertIncidentResponse(BaseModel):
    id: int
    rule_id: int | None
    rule_name: str
    severity: str
    triggered_value: float | None
    threshold_value: float | None
    condition: str | None
    service_name: str | None
    endpoint: str | None
    status: str
    triggered_at: datetime
    acknowledged_at: datetime | None
    acknowledged_by: str | None
    resolved_at: datetime | None
    resolved_by: str | None
    resolution_notes: str | None

    model_config = ConfigDict(from_attributes=True)


class UptimeDailyResponse(BaseModel):
    service_name: str
    date: date
    uptime_percent: float | None

    model_config = ConfigDict(from_attributes=True)


# --- GET responses ---

class HealthResponse(CamelModel):
    services: list[ServiceHealthResponse]
    overall: str


class ErrorListResponse(CamelModel):
    errors: list[ErrorLogResponse]
    counts: dict[str, int]
    total: int


class MetricListResponse(CamelModel):
    metrics: list[PerformanceMetricResponse]
    total: int


class AlertsResponse(CamelModel):
    active_incidents: list[AlertIncidentResponse]
    rules: list[AlertRuleResponse]
    alert_count: int


class UptimeResponse(CamelModel):
    uptime: list[UptimeDailyResponse]
    overall_uptime: float


class DashboardHealth(CamelModel):
    services: list[ServiceHealthResponse]
    healthy: int
    total: int
    status: str


class DashboardErrors(CamelModel):
    recent: list[ErrorLogResponse]
    count: int


class DashboardAlerts(CamelModel):
    active: list[AlertIncidentResponse]
    count: int


class DashboardUptime(CamelModel):
    data: list[UptimeDailyResponse]
    average: float


class DashboardResponse(CamelModel):
    health: DashboardHealth
    errors: DashboardErrors
    alerts: DashboardAlerts
    uptime: DashboardUptime


# --- POST / PATCH responses ---

class ProbeResultResponse(CamelModel):
    service: str
    status: str
    response_time: int
    status_code: int
    error_message: str | None = None


class HealthCheckResponse(CamelModel):
    success: bool = True
    results: list[ProbeResultResponse]
    timestamp: datetime


class LogErrorResponse(CamelModel):
    success: bool = True
    error_id: int
    error_hash: str
    occurrences: int


class RecordMetricResponse(CamelModel):
    success: bool = True
    metric_id: int


class TriggerAlertResponse(CamelModel):
    success: bool = True
    incident_id: int


class RuleResponse(CamelModel):
    success: bool = True
    rule: AlertRuleResponse


class RuleEvaluationResponse(CamelModel):
    rule_id: int
    rule_name: str
    outcome: str
    observed_value: float | None = None
    sample_count: int = 0
    incident_id: int | None = None

    model_config = ConfigDict(from_attributes=True)


class EvaluateRulesResponse(CamelModel):
    success: bool = True
    evaluations: list[RuleEvaluationResponse]
    triggered: int


class UpdateIncidentResponse(CamelModel):
    success: bool = True
    incident: AlertIncidentResponse

"""Database models."""

from observatory.persistence.models.alert import (
    AlertIncident,
    AlertRule,
    IncidentStatus,
    RuleCondition,
)
from observatory.persistence.models.error_log import ErrorLog, UserImpact
from observatory.persistence.models.performance_metric import MetricType, PerformanceMetric
from observatory.persistence.models.service_health import HealthStatus, ServiceHealthRecord
from observatory.persistence.models.uptime_daily import UptimeDaily

__all__ = [
    "AlertIncident",
    "AlertRule",
    "ErrorLog",
    "HealthStatus",
    "IncidentStatus",
    "MetricType",
    "PerformanceMetric",
    "RuleCondition",
    "ServiceHealthRecord",
    "UptimeDaily",
    "UserImpact",
]

"""Domain services."""

from observatory.domain.services.dashboard_service import DashboardService
from observatory.domain.services.error_log_service import ErrorLogService
from observatory.domain.services.health_service import HealthService
from observatory.domain.services.incident_service import IncidentService
from observatory.domain.services.metric_service import MetricService
from observatory.domain.services.probe_runner import ProbeRunner
from observatory.domain.services.rule_evaluator import RuleEvaluator
from observatory.domain.services.uptime_service import UptimeService

__all__ = [
    "DashboardService",
    "ErrorLogService",
    "HealthService",
    "IncidentService",
    "MetricService",
    "ProbeRunner",
    "RuleEvaluator",
    "UptimeService",
]

"""Repository implementations."""

from observatory.persistence.repositories.alert_repository import (
    AlertIncidentRepository,
    AlertRuleRepository,
)
from observatory.persistence.repositories.base import BaseRepository
from observatory.persistence.repositories.error_log_repository import ErrorLogRepository
from observatory.persistence.repositories.performance_metric_repository import (
    PerformanceMetricRepository,
)
from observatory.persistence.repositories.service_health_repository import ServiceHealthRepository
from observatory.persistence.repositories.uptime_repository import UptimeRepository

__all__ = [
    "AlertIncidentRepository",
    "AlertRuleRepository",
    "BaseRepository",
    "ErrorLogRepository",
    "PerformanceMetricRepository",
    "ServiceHealthRepository",
    "UptimeRepository",
]

"""Metric recorder: accepts numeric measurements and answers windowed queries."""

import logging
import math
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from observatory.core.errors import ValidationError
from observatory.core.time_windows import DEFAULT_LIMIT, TimeRange, clamp_limit, resolve_window_start
from observatory.persistence.models.performance_metric import MetricType, PerformanceMetric
from observatory.persistence.repositories.performance_metric_repository import (
    PerformanceMetricRepository,
)

logger = logging.getLogger(__name__)


def normalize_tags(tags: dict[str, Any] | None) -> dict[str, str]:
    """Coerce tag values to strings.

    Scalar values are stringified; nested values are rejected.

    Raises:
        ValidationError: If tags is not a mapping or holds a non-scalar value
    """
    if tags is None:
        return {}
    if not isinstance(tags, dict):
        raise ValidationError("tags must be an object of string values")

    normalized: dict[str, str] = {}
    for key, value in tags.items():
        if isinstance(value, (dict, list, tuple, set)) or value is None:
            raise ValidationError(f"Tag '{key}' must be a string, number, or boolean")
        if isinstance(value, bool):
            normalized[str(key)] = "true" if value else "false"
        else:
            normalized[str(key)] = str(value)
    return normalized


class MetricService:
    """Service for recording and querying performance metrics."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize metric service."""
        self.repo = PerformanceMetricRepository(session)

    async def record(
        self,
        metric_name: str | None,
        value: float | int | None,
        service_name: str | None,
        metric_type: str | MetricType | None = None,
        unit: str | None = None,
        endpoint: str | None = None,
        tags: dict[str, Any] | None = None,
    ) -> PerformanceMetric:
        """Validate and append a measurement.

        A value of zero is a valid measurement; only a missing value is rejected.

        Raises:
            ValidationError: If a required field is missing or a value is malformed
        """
        if not metric_name or value is None or not service_name:
            raise ValidationError("metricName, value, and serviceName required")

        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError("value must be a number")
        if not math.isfinite(value):
            raise ValidationError("value must be a finite number")

        if metric_type is None:
            kind = MetricType.GAUGE
        else:
            try:
                kind = MetricType(metric_type)
            except ValueError:
                valid = ", ".join(t.value for t in MetricType)
                raise ValidationError(f"Invalid metricType '{metric_type}'. Use: {valid}")

        metric = await self.repo.create(
            metric_name=metric_name,
            metric_type=kind.value,
            value=float(value),
            unit=unit,
            service_name=service_name,
            endpoint=endpoint,
            tags=normalize_tags(tags),
        )

        logger.debug(
            f"Metric recorded: {metric_name}={value} for {service_name}",
            extra={"metric_id": metric.id},
        )
        return metric

    async def query(
        self,
        time_range: str | TimeRange | None = None,
        service_name: str | None = None,
        limit: int | str | None = DEFAULT_LIMIT,
    ) -> list[PerformanceMetric]:
        """List metrics recorded in the window, newest first."""
        since = resolve_window_start(time_range)
        return await self.repo.list_recent(
            since=since,
            limit=clamp_limit(limit),
            service_name=service_name or None,
        )

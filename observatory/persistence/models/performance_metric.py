"""Performance metric model."""

from enum import Enum

from sqlalchemy import JSON, Column, DateTime, Float, Index, Integer, String

from observatory.core.time_windows import utcnow
from observatory.persistence.database import Base


class MetricType(str, Enum):
    """Kinds of numeric measurement."""

    GAUGE = "gauge"
    COUNTER = "counter"
    HISTOGRAM = "histogram"


class PerformanceMetric(Base):
    """One named numeric measurement tagged by service and endpoint."""

    __tablename__ = "performance_metrics"

    id = Column(Integer, primary_key=True, index=True)

    metric_name = Column(String(255), nullable=False)
    metric_type = Column(String(20), nullable=False, default=MetricType.GAUGE.value)
    value = Column(Float, nullable=False)
    unit = Column(String(50), nullable=True)  # ms, bytes, percent, ...

    service_name = Column(String(255), nullable=False)
    endpoint = Column(String(1024), nullable=True)
    tags = Column(JSON, nullable=False, default=dict)  # {str: str}

    recorded_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index("ix_performance_metrics_recorded_at", "recorded_at"),
        Index("ix_performance_metrics_name_recorded", "metric_name", "recorded_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<PerformanceMetric(id={self.id}, name={self.metric_name}, "
            f"value={self.value}, service={self.service_name})>"
        )

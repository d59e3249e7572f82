"""Service health record model."""

from enum import Enum

from sqlalchemy import Column, DateTime, Index, Integer, String, Text

from observatory.core.time_windows import utcnow
from observatory.persistence.database import Base


class HealthStatus(str, Enum):
    """Classification of a probe outcome."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ServiceHealthRecord(Base):
    """One snapshot per probe execution.

    Append-only: the current health of a service is its most recent
    record by ``checked_at``.
    """

    __tablename__ = "service_health"

    id = Column(Integer, primary_key=True, index=True)

    service_name = Column(String(255), nullable=False)
    service_url = Column(String(2048), nullable=False)
    service_type = Column(String(50), nullable=False)  # website, database, api

    status = Column(String(20), nullable=False)  # healthy, degraded, unhealthy
    status_code = Column(Integer, nullable=False, default=0)  # 0 when no response
    response_time_ms = Column(Integer, nullable=False)
    error_message = Column(Text, nullable=True)

    checked_at = Column(DateTime, nullable=False, default=utcnow)
    last_healthy_at = Column(DateTime, nullable=True)
    last_unhealthy_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("ix_service_health_checked_at", "checked_at"),
        Index("ix_service_health_service_checked", "service_name", "checked_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<ServiceHealthRecord(id={self.id}, service={self.service_name}, "
            f"status={self.status}, response_time_ms={self.response_time_ms})>"
        )

"""Alert rule and alert incident models."""

from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Index, Integer, String, Text

from observatory.core.time_windows import utcnow
from observatory.persistence.database import Base


class IncidentStatus(str, Enum):
    """Lifecycle states of an alert incident."""

    OPEN = "open"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"


ACTIVE_INCIDENT_STATUSES = (IncidentStatus.OPEN.value, IncidentStatus.ACKNOWLEDGED.value)


class RuleCondition(str, Enum):
    """Comparison applied between an observed value and a rule threshold."""

    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    EQ = "eq"


class AlertRule(Base):
    """Configured alert rule.

    Only ``is_active`` and ``last_triggered_at`` change after creation.
    Rules with a ``metric_name`` can be evaluated against recorded
    performance metrics; rules without one are triggered externally.
    """

    __tablename__ = "alert_rules"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    metric_name = Column(String(255), nullable=True)
    service_name = Column(String(255), nullable=True)
    condition = Column(String(10), nullable=True)  # gt, gte, lt, lte, eq
    threshold_value = Column(Float, nullable=True)
    severity = Column(String(20), nullable=False, default="warning")
    window = Column("evaluation_window", String(10), nullable=False, default="1h")

    last_triggered_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<AlertRule(id={self.id}, name={self.name}, active={self.is_active})>"


class AlertIncident(Base):
    """An alert raised by rule evaluation or an explicit trigger.

    Never deleted. Status moves open -> acknowledged -> resolved, or
    directly open -> resolved.
    """

    __tablename__ = "alert_incidents"

    id = Column(Integer, primary_key=True, index=True)
    rule_id = Column(
        Integer, ForeignKey("alert_rules.id", ondelete="SET NULL"), nullable=True
    )  # NULL for incidents raised without a rule
    rule_name = Column(String(255), nullable=False)
    severity = Column(String(20), nullable=False)  # info, warning, critical

    triggered_value = Column(Float, nullable=True)
    threshold_value = Column(Float, nullable=True)
    condition = Column(String(255), nullable=True)
    service_name = Column(String(255), nullable=True)
    endpoint = Column(String(1024), nullable=True)

    status = Column(String(20), nullable=False, default=IncidentStatus.OPEN.value)

    triggered_at = Column(DateTime, nullable=False, default=utcnow)
    acknowledged_at = Column(DateTime, nullable=True)
    acknowledged_by = Column(String(255), nullable=True)
    resolved_at = Column(DateTime, nullable=True)
    resolved_by = Column(String(255), nullable=True)
    resolution_notes = Column(Text, nullable=True)

    __table_args__ = (
        Index("ix_alert_incidents_status_triggered", "status", "triggered_at"),
        Index("ix_alert_incidents_rule_status", "rule_id", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<AlertIncident(id={self.id}, rule={self.rule_name}, "
            f"severity={self.severity}, status={self.status})>"
        )

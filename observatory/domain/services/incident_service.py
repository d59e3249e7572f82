"""Incident manager: owns the alert incident lifecycle and alert rules.

Incidents move open -> acknowledged -> resolved, or open -> resolved
directly. Nothing leaves resolved. Status changes are applied with a
compare-and-swap on the current status so two concurrent callers cannot
both acknowledge or resolve the same incident.
"""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from observatory.core.errors import InvalidTransitionError, NotFoundError, ValidationError
from observatory.core.time_windows import TimeRange, utcnow
from observatory.persistence.models.alert import AlertIncident, AlertRule, IncidentStatus, RuleCondition
from observatory.persistence.repositories.alert_repository import (
    AlertIncidentRepository,
    AlertRuleRepository,
)

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[IncidentStatus, frozenset[IncidentStatus]] = {
    IncidentStatus.OPEN: frozenset({IncidentStatus.ACKNOWLEDGED, IncidentStatus.RESOLVED}),
    IncidentStatus.ACKNOWLEDGED: frozenset({IncidentStatus.RESOLVED}),
    IncidentStatus.RESOLVED: frozenset(),
}


def parse_incident_status(value: str | IncidentStatus | None) -> IncidentStatus:
    """Parse a status value.

    Raises:
        ValidationError: If the value is not a recognized status
    """
    try:
        return IncidentStatus(value)
    except ValueError:
        valid = ", ".join(s.value for s in IncidentStatus)
        raise ValidationError(f"Invalid status '{value}'. Use: {valid}")


def can_transition(current: IncidentStatus, target: IncidentStatus) -> bool:
    """Check a status change against the transition table."""
    return target in ALLOWED_TRANSITIONS[current]


class IncidentService:
    """Service for triggering and transitioning alert incidents."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize incident service."""
        self.session = session
        self.incident_repo = AlertIncidentRepository(session)
        self.rule_repo = AlertRuleRepository(session)

    async def trigger(
        self,
        rule_name: str | None,
        severity: str | None,
        rule_id: int | None = None,
        triggered_value: float | None = None,
        threshold_value: float | None = None,
        condition: str | None = None,
        service_name: str | None = None,
        endpoint: str | None = None,
    ) -> AlertIncident:
        """Open a new incident.

        When ``rule_id`` is given the rule's last_triggered_at is updated
        after the incident is stored. The incident is the source of truth:
        if that secondary update fails it is logged and the incident is
        still returned.

        Raises:
            ValidationError: If rule_name or severity is missing
            NotFoundError: If rule_id refers to a rule that does not exist
        """
        if not rule_name or not severity:
            raise ValidationError("ruleName and severity required")

        if rule_id is not None and await self.rule_repo.get_by_id(rule_id) is None:
            raise NotFoundError(f"Alert rule {rule_id} not found")

        incident = await self.incident_repo.create(
            rule_id=rule_id,
            rule_name=rule_name,
            severity=severity,
            triggered_value=triggered_value,
            threshold_value=threshold_value,
            condition=condition,
            service_name=service_name,
            endpoint=endpoint,
            status=IncidentStatus.OPEN.value,
            triggered_at=utcnow(),
        )

        logger.info(
            f"Incident opened: {rule_name} ({severity})",
            extra={"incident_id": incident.id, "rule_id": rule_id, "service_name": service_name},
        )

        if rule_id is not None:
            incident_id = incident.id
            try:
                await self.rule_repo.mark_triggered(rule_id, incident.triggered_at)
            except SQLAlchemyError:
                # Rollback expires every instance, the committed incident included
                await self.session.rollback()
                logger.error(
                    f"Failed to update last_triggered_at for rule {rule_id} "
                    f"after opening incident {incident_id}",
                    exc_info=True,
                    extra={"incident_id": incident_id, "rule_id": rule_id},
                )
                await self.session.refresh(incident)

        return incident

    async def get_incident(self, incident_id: int) -> AlertIncident:
        """Get an incident by id.

        Raises:
            NotFoundError: If the incident does not exist
        """
        incident = await self.incident_repo.get_by_id(incident_id)
        if incident is None:
            raise NotFoundError(f"Incident {incident_id} not found")
        return incident

    async def transition(
        self,
        incident_id: int,
        new_status: str | IncidentStatus | None,
        actor: str | None = None,
        notes: str | None = None,
    ) -> AlertIncident:
        """Move an incident to a new status.

        Raises:
            ValidationError: If new_status is not a recognized status
            NotFoundError: If the incident does not exist
            InvalidTransitionError: If the change is not allowed from the current status
        """
        target = parse_incident_status(new_status)
        incident = await self.get_incident(incident_id)
        current = IncidentStatus(incident.status)

        if not can_transition(current, target):
            raise InvalidTransitionError(
                f"Cannot change incident {incident_id} from {current.value} to {target.value}"
            )

        # Keep triggered_at <= acknowledged_at <= resolved_at even with clock skew
        now = max(utcnow(), incident.acknowledged_at or incident.triggered_at)
        values: dict[str, Any] = {"status": target.value}
        if target == IncidentStatus.ACKNOWLEDGED:
            values["acknowledged_at"] = now
            values["acknowledged_by"] = actor
        elif target == IncidentStatus.RESOLVED:
            values["resolved_at"] = now
            values["resolved_by"] = actor
            values["resolution_notes"] = notes

        updated = await self.incident_repo.compare_and_set_status(
            incident_id, current.value, values
        )
        if updated is None:
            latest = await self.get_incident(incident_id)
            await self.session.refresh(latest)
            raise InvalidTransitionError(
                f"Incident {incident_id} changed to {latest.status} concurrently"
            )

        logger.info(
            f"Incident {incident_id} {current.value} -> {target.value}",
            extra={"incident_id": incident_id, "actor": actor},
        )
        return updated

    async def active_incidents(self) -> list[AlertIncident]:
        """List open and acknowledged incidents, newest triggered first."""
        return await self.incident_repo.list_active()

    async def active_rules(self) -> list[AlertRule]:
        """List rules with is_active set."""
        return await self.rule_repo.list_active()

    async def create_rule(
        self,
        name: str | None,
        severity: str | None = "warning",
        metric_name: str | None = None,
        service_name: str | None = None,
        condition: str | None = None,
        threshold_value: float | None = None,
        window: str | None = None,
        is_active: bool = True,
    ) -> AlertRule:
        """Create an alert rule.

        A rule with a metric_name is evaluable and needs both a condition
        and a threshold_value.

        Raises:
            ValidationError: If the rule definition is incomplete or malformed
        """
        if not name:
            raise ValidationError("name required")

        if condition is not None:
            try:
                condition = RuleCondition(condition).value
            except ValueError:
                valid = ", ".join(c.value for c in RuleCondition)
                raise ValidationError(f"Invalid condition '{condition}'. Use: {valid}")

        if metric_name and (condition is None or threshold_value is None):
            raise ValidationError("condition and thresholdValue required when metricName is set")

        if window is None:
            window = TimeRange.ONE_HOUR.value
        else:
            try:
                window = TimeRange(window).value
            except ValueError:
                valid = ", ".join(r.value for r in TimeRange)
                raise ValidationError(f"Invalid window '{window}'. Use: {valid}")

        rule = await self.rule_repo.create(
            name=name,
            severity=severity or "warning",
            metric_name=metric_name,
            service_name=service_name,
            condition=condition,
            threshold_value=threshold_value,
            window=window,
            is_active=is_active,
        )
        logger.info(f"Alert rule created: {name}", extra={"rule_id": rule.id})
        return rule

    async def set_rule_active(self, rule_id: int, is_active: bool) -> AlertRule:
        """Enable or disable a rule.

        Raises:
            NotFoundError: If the rule does not exist
        """
        rule = await self.rule_repo.set_active(rule_id, is_active)
        if rule is None:
            raise NotFoundError(f"Alert rule {rule_id} not found")
        logger.info(
            f"Alert rule {rule_id} {'enabled' if is_active else 'disabled'}",
            extra={"rule_id": rule_id},
        )
        return rule

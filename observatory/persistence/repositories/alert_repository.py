"""Alert rule and incident repositories."""

from datetime import datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from observatory.persistence.models.alert import (
    ACTIVE_INCIDENT_STATUSES,
    AlertIncident,
    AlertRule,
)
from observatory.persistence.repositories.base import BaseRepository


class AlertRuleRepository(BaseRepository[AlertRule]):
    """Repository for alert rules."""

    def __init__(self, session: AsyncSession):
        """Initialize alert rule repository."""
        super().__init__(AlertRule, session)

    async def list_active(self) -> list[AlertRule]:
        """List rules with is_active set, oldest first."""
        stmt = select(AlertRule).where(AlertRule.is_active.is_(True)).order_by(AlertRule.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def mark_triggered(self, rule_id: int, triggered_at: datetime) -> bool:
        """Set last_triggered_at on a rule.

        Returns:
            True if the rule exists
        """
        stmt = (
            update(AlertRule)
            .where(AlertRule.id == rule_id)
            .values(last_triggered_at=triggered_at)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0

    async def set_active(self, rule_id: int, is_active: bool) -> AlertRule | None:
        """Toggle a rule on or off."""
        rule = await self.get_by_id(rule_id)
        if rule is None:
            return None
        rule.is_active = is_active
        await self.session.commit()
        await self.session.refresh(rule)
        return rule


class AlertIncidentRepository(BaseRepository[AlertIncident]):
    """Repository for alert incidents.

    Incidents are never deleted; status changes go through
    ``compare_and_set_status`` so concurrent updates cannot both win.
    """

    timestamp_column = "triggered_at"

    def __init__(self, session: AsyncSession):
        """Initialize alert incident repository."""
        super().__init__(AlertIncident, session)

    async def list_active(self, rule_id: int | None = None) -> list[AlertIncident]:
        """List open and acknowledged incidents, newest triggered first."""
        stmt = select(AlertIncident).where(AlertIncident.status.in_(ACTIVE_INCIDENT_STATUSES))
        if rule_id is not None:
            stmt = stmt.where(AlertIncident.rule_id == rule_id)
        stmt = stmt.order_by(AlertIncident.triggered_at.desc(), AlertIncident.id.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def compare_and_set_status(
        self,
        incident_id: int,
        expected_status: str,
        values: dict[str, Any],
    ) -> AlertIncident | None:
        """Apply ``values`` only if the incident still has ``expected_status``.

        Returns:
            The refreshed incident, or None if the status changed underneath us
        """
        stmt = (
            update(AlertIncident)
            .where(
                AlertIncident.id == incident_id,
                AlertIncident.status == expected_status,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        if result.rowcount == 0:
            return None

        incident = await self.get_by_id(incident_id)
        if incident is not None:
            await self.session.refresh(incident)
        return incident

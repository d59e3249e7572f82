"""Alert rule evaluation against recorded performance metrics.

Runs on a schedule. Each active rule with a metric compares the mean of
that metric over the rule's window against its threshold and opens an
incident when the condition holds. A rule that already has an open or
acknowledged incident is not triggered again.
"""

import logging
import operator
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession

from observatory.core.time_windows import resolve_window_start, utcnow
from observatory.domain.services.incident_service import IncidentService
from observatory.persistence.models.alert import AlertRule, RuleCondition
from observatory.persistence.repositories.alert_repository import AlertIncidentRepository
from observatory.persistence.repositories.performance_metric_repository import (
    PerformanceMetricRepository,
)

logger = logging.getLogger(__name__)

CONDITION_OPERATORS: dict[RuleCondition, Callable[[float, float], bool]] = {
    RuleCondition.GT: operator.gt,
    RuleCondition.GTE: operator.ge,
    RuleCondition.LT: operator.lt,
    RuleCondition.LTE: operator.le,
    RuleCondition.EQ: operator.eq,
}


@dataclass
class RuleEvaluation:
    """Outcome of evaluating one rule."""

    rule_id: int
    rule_name: str
    outcome: str  # triggered, ok, no_data, already_open, skipped, error
    observed_value: float | None = None
    sample_count: int = 0
    incident_id: int | None = None


def condition_holds(condition: str, observed: float, threshold: float) -> bool:
    """Apply a rule condition to an observed value."""
    return CONDITION_OPERATORS[RuleCondition(condition)](observed, threshold)


class RuleEvaluator:
    """Evaluates active alert rules and triggers incidents for breaches."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize rule evaluator."""
        self.session = session
        self.incidents = IncidentService(session)
        self.incident_repo = AlertIncidentRepository(session)
        self.metric_repo = PerformanceMetricRepository(session)

    async def evaluate_all(self, now: datetime | None = None) -> list[RuleEvaluation]:
        """Evaluate every active rule.

        A rule whose evaluation fails is logged and reported with an
        ``error`` outcome; the remaining rules are still evaluated.
        """
        if now is None:
            now = utcnow()

        results = []
        errors = 0
        for rule in await self.incidents.active_rules():
            # A rollback after an earlier failure expires loaded rules
            if inspect(rule).expired:
                await self.session.refresh(rule)
            rule_id, rule_name = rule.id, rule.name
            try:
                results.append(await self.evaluate(rule, now))
            except Exception as e:
                await self.session.rollback()
                logger.error(
                    f"Rule evaluation failed for rule {rule_id}: {e}",
                    exc_info=True,
                    extra={"rule_id": rule_id},
                )
                errors += 1
                results.append(RuleEvaluation(rule_id=rule_id, rule_name=rule_name, outcome="error"))

        triggered = sum(1 for r in results if r.outcome == "triggered")
        logger.info(
            f"Rule evaluation complete: {len(results)} rules, {triggered} triggered, {errors} errors",
            extra={"rules": len(results), "triggered": triggered, "errors": errors},
        )
        return results

    async def evaluate(self, rule: AlertRule, now: datetime | None = None) -> RuleEvaluation:
        """Evaluate one rule and trigger an incident if it is breached."""
        if not rule.metric_name or rule.condition is None or rule.threshold_value is None:
            return RuleEvaluation(rule_id=rule.id, rule_name=rule.name, outcome="skipped")

        since = resolve_window_start(rule.window, now)
        observed, count = await self.metric_repo.average_since(
            rule.metric_name, since, service_name=rule.service_name
        )
        if observed is None:
            return RuleEvaluation(rule_id=rule.id, rule_name=rule.name, outcome="no_data")

        result = RuleEvaluation(
            rule_id=rule.id,
            rule_name=rule.name,
            outcome="ok",
            observed_value=observed,
            sample_count=count,
        )
        if not condition_holds(rule.condition, observed, rule.threshold_value):
            return result

        if await self.incident_repo.list_active(rule_id=rule.id):
            result.outcome = "already_open"
            return result

        incident = await self.incidents.trigger(
            rule_name=rule.name,
            severity=rule.severity,
            rule_id=rule.id,
            triggered_value=observed,
            threshold_value=rule.threshold_value,
            condition=f"{rule.metric_name} {rule.condition} {rule.threshold_value:g}",
            service_name=rule.service_name,
        )
        result.outcome = "triggered"
        result.incident_id = incident.id
        return result

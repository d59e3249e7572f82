"""Error log store: accepts structured error reports and answers windowed queries."""

import logging
from collections import Counter
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from observatory.core.errors import ValidationError
from observatory.core.fingerprint import compute_error_hash
from observatory.core.time_windows import DEFAULT_LIMIT, TimeRange, clamp_limit, resolve_window_start
from observatory.persistence.models.error_log import ErrorLog, UserImpact
from observatory.persistence.repositories.error_log_repository import ErrorLogRepository

logger = logging.getLogger(__name__)


@dataclass
class ErrorQueryResult:
    """Errors in a window with per-type counts over the returned rows only."""

    errors: list[ErrorLog] = field(default_factory=list)
    counts: dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.errors)


class ErrorLogService:
    """Service for logging and querying application errors."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize error log service."""
        self.repo = ErrorLogRepository(session)

    async def log_error(
        self,
        service_name: str | None,
        error_type: str | None,
        error_message: str | None,
        stack_trace: str | None = None,
        endpoint: str | None = None,
        user_id: str | None = None,
        request_id: str | None = None,
        user_impact: str | UserImpact | None = None,
    ) -> ErrorLog:
        """Validate, fingerprint, and append an error report.

        Raises:
            ValidationError: If a required field is empty or user_impact is unknown
        """
        if not service_name or not error_type or not error_message:
            raise ValidationError("serviceName, errorType, and errorMessage required")

        if user_impact is None:
            impact = UserImpact.MINOR
        else:
            try:
                impact = UserImpact(user_impact)
            except ValueError:
                valid = ", ".join(i.value for i in UserImpact)
                raise ValidationError(f"Invalid userImpact '{user_impact}'. Use: {valid}")

        error_hash = compute_error_hash(service_name, error_type, error_message, endpoint)

        entry = await self.repo.create(
            service_name=service_name,
            error_type=error_type,
            error_message=error_message,
            stack_trace=stack_trace,
            endpoint=endpoint,
            user_id=user_id,
            request_id=request_id,
            error_hash=error_hash,
            user_impact=impact.value,
        )

        logger.info(
            f"Error logged for {service_name}: {error_type}",
            extra={"error_id": entry.id, "error_hash": error_hash, "user_impact": impact.value},
        )
        return entry

    async def occurrences(self, error_hash: str) -> int:
        """Count stored reports sharing a fingerprint."""
        return await self.repo.count_by_hash(error_hash)

    async def query(
        self,
        time_range: str | TimeRange | None = None,
        service_name: str | None = None,
        limit: int | str | None = DEFAULT_LIMIT,
    ) -> ErrorQueryResult:
        """List errors in the window newest first, with counts by error type.

        Counts cover only the rows returned, not matches beyond ``limit``.
        """
        since = resolve_window_start(time_range)
        errors = await self.repo.list_recent(
            since=since,
            limit=clamp_limit(limit),
            service_name=service_name or None,
        )
        counts = Counter(e.error_type for e in errors)
        return ErrorQueryResult(errors=errors, counts=dict(counts))

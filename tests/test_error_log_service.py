"""Tests for the error log store."""

from datetime import timedelta

import pytest

from observatory.core.errors import ValidationError
from observatory.core.fingerprint import compute_error_hash
from observatory.core.time_windows import utcnow
from observatory.domain.services.error_log_service import ErrorLogService
from observatory.persistence.repositories.error_log_repository import ErrorLogRepository


async def insert_error(session, service_name="api", error_type="Timeout", age=timedelta(0)):
    return await ErrorLogRepository(session).create(
        service_name=service_name,
        error_type=error_type,
        error_message="upstream 504",
        error_hash=compute_error_hash(service_name, error_type, "upstream 504"),
        user_impact="minor",
        created_at=utcnow() - age,
    )


class TestLogError:
    """Tests for accepting error reports."""

    async def test_duplicate_reports_share_hash(self, db_session):
        """Two identical reports are stored separately with one fingerprint."""
        service = ErrorLogService(db_session)

        first = await service.log_error("api", "Timeout", "upstream 504", endpoint="/v1/x")
        second = await service.log_error("api", "Timeout", "upstream 504", endpoint="/v1/x")

        assert first.id != second.id
        assert first.error_hash == second.error_hash
        assert first.error_hash == compute_error_hash("api", "Timeout", "upstream 504", "/v1/x")
        assert await service.occurrences(first.error_hash) == 2

    async def test_different_endpoint_gets_different_hash(self, db_session):
        service = ErrorLogService(db_session)

        a = await service.log_error("api", "Timeout", "upstream 504", endpoint="/v1/x")
        b = await service.log_error("api", "Timeout", "upstream 504", endpoint="/v1/y")

        assert a.error_hash != b.error_hash
        assert await service.occurrences(a.error_hash) == 1

    async def test_user_impact_defaults_to_minor(self, db_session):
        entry = await ErrorLogService(db_session).log_error("api", "Timeout", "boom")

        assert entry.user_impact == "minor"
        assert entry.created_at is not None

    async def test_optional_fields_are_stored(self, db_session):
        entry = await ErrorLogService(db_session).log_error(
            "api",
            "KeyError",
            "'id'",
            stack_trace="Traceback...",
            endpoint="/v1/items",
            user_id="user-7",
            request_id="req-1",
            user_impact="severe",
        )

        assert entry.stack_trace == "Traceback..."
        assert entry.user_id == "user-7"
        assert entry.request_id == "req-1"
        assert entry.user_impact == "severe"

    @pytest.mark.parametrize(
        "service_name,error_type,error_message",
        [
            (None, "Timeout", "boom"),
            ("api", "", "boom"),
            ("api", "Timeout", None),
        ],
    )
    async def test_missing_required_field(self, db_session, service_name, error_type, error_message):
        with pytest.raises(ValidationError) as exc:
            await ErrorLogService(db_session).log_error(service_name, error_type, error_message)

        assert exc.value.message == "serviceName, errorType, and errorMessage required"

    async def test_unknown_user_impact_is_rejected(self, db_session):
        with pytest.raises(ValidationError, match="userImpact"):
            await ErrorLogService(db_session).log_error("api", "Timeout", "boom", user_impact="catastrophic")


class TestQueryErrors:
    """Tests for windowed error queries."""

    async def test_window_excludes_older_rows(self, db_session):
        await insert_error(db_session, age=timedelta(minutes=10))
        await insert_error(db_session, age=timedelta(hours=3))

        result = await ErrorLogService(db_session).query("1h")

        assert result.total == 1
        assert result.counts == {"Timeout": 1}

    async def test_unknown_range_behaves_like_24h(self, db_session):
        await insert_error(db_session, age=timedelta(hours=23))
        await insert_error(db_session, age=timedelta(hours=25))

        service = ErrorLogService(db_session)
        bogus = await service.query("forever")
        day = await service.query("24h")

        assert [e.id for e in bogus.errors] == [e.id for e in day.errors]
        assert bogus.total == 1

    async def test_newest_first_and_filtered_by_service(self, db_session):
        oldest = await insert_error(db_session, age=timedelta(minutes=30))
        newest = await insert_error(db_session, age=timedelta(minutes=1))
        await insert_error(db_session, service_name="web", age=timedelta(minutes=5))

        result = await ErrorLogService(db_session).query("1h", service_name="api")

        assert [e.id for e in result.errors] == [newest.id, oldest.id]

    async def test_counts_cover_returned_rows_only(self, db_session):
        for minutes in (1, 2, 3):
            await insert_error(db_session, error_type="Timeout", age=timedelta(minutes=minutes))
        await insert_error(db_session, error_type="KeyError", age=timedelta(minutes=10))

        result = await ErrorLogService(db_session).query("1h", limit=2)

        assert result.total == 2
        assert result.counts == {"Timeout": 2}

    async def test_limit_is_clamped(self, db_session):
        await insert_error(db_session, age=timedelta(minutes=1))
        await insert_error(db_session, age=timedelta(minutes=2))

        service = ErrorLogService(db_session)

        assert (await service.query("1h", limit=0)).total == 1
        assert (await service.query("1h", limit="not-a-number")).total == 2

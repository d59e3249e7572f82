"""Tests for the metric recorder."""

from datetime import timedelta

import pytest

from observatory.core.errors import ValidationError
from observatory.core.time_windows import utcnow
from observatory.domain.services.metric_service import MetricService, normalize_tags
from observatory.persistence.repositories.performance_metric_repository import (
    PerformanceMetricRepository,
)


def test_normalize_tags():
    assert normalize_tags(None) == {}
    assert normalize_tags({"region": "eu", "shard": 3, "canary": True, "ratio": 0.5}) == {
        "region": "eu",
        "shard": "3",
        "canary": "true",
        "ratio": "0.5",
    }


@pytest.mark.parametrize("tags", [{"nested": {"a": 1}}, {"list": [1, 2]}, {"none": None}, ["a"]])
def test_normalize_tags_rejects_non_scalars(tags):
    with pytest.raises(ValidationError):
        normalize_tags(tags)


class TestRecordMetric:
    """Tests for accepting measurements."""

    async def test_zero_is_a_valid_value(self, db_session):
        metric = await MetricService(db_session).record("queue_depth", 0, "worker")

        assert metric.id is not None
        assert metric.value == 0.0
        assert metric.metric_type == "gauge"
        assert metric.tags == {}

    async def test_missing_value_is_rejected(self, db_session):
        with pytest.raises(ValidationError) as exc:
            await MetricService(db_session).record("queue_depth", None, "worker")

        assert exc.value.message == "metricName, value, and serviceName required"

    @pytest.mark.parametrize("metric_name,service_name", [("", "worker"), ("latency", None)])
    async def test_missing_names_are_rejected(self, db_session, metric_name, service_name):
        with pytest.raises(ValidationError):
            await MetricService(db_session).record(metric_name, 1.0, service_name)

    @pytest.mark.parametrize("value", [True, "12", float("nan"), float("inf")])
    async def test_non_numeric_values_are_rejected(self, db_session, value):
        with pytest.raises(ValidationError):
            await MetricService(db_session).record("latency", value, "api")

    async def test_unknown_metric_type_is_rejected(self, db_session):
        with pytest.raises(ValidationError, match="metricType"):
            await MetricService(db_session).record("latency", 1, "api", metric_type="summary")

    async def test_all_fields_are_stored(self, db_session):
        metric = await MetricService(db_session).record(
            "latency",
            123.5,
            "api",
            metric_type="histogram",
            unit="ms",
            endpoint="/v1/items",
            tags={"region": "eu", "attempt": 2},
        )

        assert metric.metric_type == "histogram"
        assert metric.unit == "ms"
        assert metric.endpoint == "/v1/items"
        assert metric.tags == {"region": "eu", "attempt": "2"}
        assert metric.recorded_at is not None


class TestQueryMetrics:
    """Tests for windowed metric queries."""

    async def test_window_service_and_order(self, db_session):
        repo = PerformanceMetricRepository(db_session)
        now = utcnow()
        older = await repo.create(
            metric_name="latency", value=1.0, service_name="api", recorded_at=now - timedelta(minutes=30)
        )
        newer = await repo.create(
            metric_name="latency", value=2.0, service_name="api", recorded_at=now - timedelta(minutes=2)
        )
        await repo.create(
            metric_name="latency", value=3.0, service_name="web", recorded_at=now - timedelta(minutes=2)
        )
        await repo.create(
            metric_name="latency", value=4.0, service_name="api", recorded_at=now - timedelta(hours=2)
        )

        metrics = await MetricService(db_session).query("1h", service_name="api")

        assert [m.id for m in metrics] == [newer.id, older.id]

    async def test_limit_caps_results(self, db_session):
        service = MetricService(db_session)
        for value in range(5):
            await service.record("latency", value, "api")

        assert len(await service.query("1h", limit=3)) == 3

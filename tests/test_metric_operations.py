"""Tests for the metric log."""

from datetime import date, datetime

import pytest

from wheeler.core.exceptions import NotFoundError, ValidationError
from wheeler.domain import MetricOperations, MetricPoint, normalize_metric_type
from wheeler.models import MetricType


def test_create_with_date_uses_midnight(session):
    row = MetricOperations.create(session, MetricType.LONG_VALUE, 100, created=date(2024, 3, 1))
    assert row.created == datetime(2024, 3, 1)
    assert row.type == "LongValue"
    assert row.value == 100.0


def test_create_accepts_kind_names(session):
    row = MetricOperations.create(session, "OpenCallCount", 3, created="2024-03-01")
    assert row.type == MetricType.OPEN_CALL_COUNT.value


@pytest.mark.parametrize("kind", ["CashValue", "longvalue", ""])
def test_unknown_kind_is_rejected(session, kind):
    with pytest.raises(ValidationError) as exc:
        MetricOperations.create(session, kind, 1.0)
    assert exc.value.field == "type"
    assert MetricOperations.count(session) == 0


def test_non_numeric_value_is_rejected(session):
    with pytest.raises(ValidationError):
        MetricOperations.create(session, MetricType.LONG_VALUE, "12")


def test_get_by_type_orders_by_created(session):
    MetricOperations.create(session, MetricType.PUT_EXPOSURE, 3.0, created=date(2024, 3, 3))
    MetricOperations.create(session, MetricType.PUT_EXPOSURE, 1.0, created=date(2024, 3, 1))
    MetricOperations.create(session, MetricType.LONG_VALUE, 9.0, created=date(2024, 3, 2))
    MetricOperations.create(session, MetricType.PUT_EXPOSURE, 2.0, created=date(2024, 3, 2))

    values = [row.value for row in MetricOperations.get_by_type(session, "PutExposure")]
    assert values == [1.0, 2.0, 3.0]


def test_get_by_date_range_is_inclusive(session):
    for day in (1, 2, 3, 4):
        MetricOperations.create(session, MetricType.LONG_COUNT, float(day), created=datetime(2024, 3, day, 15, 30))

    rows = MetricOperations.get_by_date_range(session, date(2024, 3, 2), date(2024, 3, 3))
    assert [row.value for row in rows] == [2.0, 3.0]

    filtered = MetricOperations.get_by_date_range(
        session, "2024-03-01", "2024-03-31", metric_type=MetricType.LONG_VALUE
    )
    assert filtered == []


def test_chart_data_covers_every_kind(session):
    MetricOperations.create(session, MetricType.TREASURY_VALUE, 1000.0, created=date(2024, 3, 1))
    MetricOperations.create(session, MetricType.TREASURY_VALUE, 1500.0, created=date(2024, 3, 2))

    series = MetricOperations.chart_data(session)
    assert set(series) == {kind.value for kind in MetricType}
    assert series["TreasuryValue"] == [
        MetricPoint(date(2024, 3, 1), 1000.0),
        MetricPoint(date(2024, 3, 2), 1500.0),
    ]
    assert series["LongValue"] == []
    assert series["TreasuryValue"][0].to_dict() == {"date": "2024-03-01", "value": 1000.0}


def test_chart_data_latest_per_day(session):
    MetricOperations.create(session, MetricType.LONG_VALUE, 1.0, created=date(2024, 3, 1))
    MetricOperations.create(session, MetricType.LONG_VALUE, 2.0, created=date(2024, 3, 1))

    assert [p.value for p in MetricOperations.chart_data(session)["LongValue"]] == [1.0, 2.0]
    assert [p.value for p in MetricOperations.chart_data(session, latest_per_day=True)["LongValue"]] == [2.0]


def test_update_and_delete(session):
    row = MetricOperations.create(session, MetricType.LONG_VALUE, 1.0, created=date(2024, 3, 1))

    assert MetricOperations.update_value(session, row.id, 5.5).value == 5.5
    MetricOperations.delete(session, row.id)
    assert MetricOperations.get_by_id(session, row.id) is None

    with pytest.raises(NotFoundError):
        MetricOperations.delete(session, row.id)
    with pytest.raises(NotFoundError):
        MetricOperations.update_value(session, row.id, 1.0)


def test_delete_by_type_and_count(session):
    for value in (1.0, 2.0):
        MetricOperations.create(session, MetricType.OPEN_PUT_COUNT, value)
    MetricOperations.create(session, MetricType.OPEN_CALL_COUNT, 1.0)

    assert MetricOperations.count(session) == 3
    assert MetricOperations.delete_by_type(session, MetricType.OPEN_PUT_COUNT) == 2
    assert MetricOperations.count(session, "OpenPutCount") == 0
    assert MetricOperations.count(session) == 1


def test_normalize_metric_type():
    assert normalize_metric_type("OpenPutPremium") is MetricType.OPEN_PUT_PREMIUM
    assert normalize_metric_type(MetricType.LONG_COUNT) is MetricType.LONG_COUNT

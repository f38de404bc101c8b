"""Tests for instrument helper properties on the models."""

from datetime import date

import pytest

from wheeler.models import LongPosition, MetricType, Option, Treasury


def _option(**overrides) -> Option:
    fields = dict(
        id=1,
        symbol="AAPL",
        type="Put",
        opened=date(2024, 2, 10),
        expiration=date(2024, 3, 15),
        strike=140.0,
        premium=3.50,
        contracts=2,
        commission=1.30,
    )
    fields.update(overrides)
    return Option(**fields)


def test_put_exposure_and_notional_premium():
    option = _option()
    assert option.exposure == 28000
    assert option.notional_premium == pytest.approx(700)
    assert option.is_open


def test_call_has_no_put_exposure():
    assert _option(type="Call").exposure == 0


def test_realized_premium_open_counts_full_premium():
    assert _option().realized_premium == pytest.approx(700)


def test_realized_premium_closed_subtracts_exit():
    option = _option(closed=date(2024, 3, 1), exit_price=1.25)
    assert option.realized_premium == pytest.approx((3.50 - 1.25) * 2 * 100)
    assert not option.is_open


@pytest.mark.parametrize(
    "today, status",
    [
        (date(2024, 3, 16), "Expired"),
        (date(2024, 3, 15), "Critical"),
        (date(2024, 3, 8), "Critical"),
        (date(2024, 3, 7), "Warning"),
        (date(2024, 2, 14), "Warning"),
        (date(2024, 2, 13), "Active"),
    ],
)
def test_expiration_status_thresholds(today, status):
    assert _option().expiration_status(today) == status


def test_days_to_expiration():
    assert _option().days_to_expiration(date(2024, 3, 10)) == 5


def test_long_position_amount_and_gain():
    position = LongPosition(symbol="AAPL", opened=date(2024, 3, 1), shares=25, buy_price=150.0)
    assert position.amount == 3750
    assert position.profit_loss(155.0) == 125
    assert position.realized_gain == 0

    position.closed = date(2024, 3, 15)
    position.exit_price = 155.0
    assert position.realized_gain == 125


def _treasury(**overrides) -> Treasury:
    fields = dict(
        cuspid="912797GK1",
        purchased=date(2024, 1, 1),
        maturity=date(2024, 7, 1),
        amount=10000.0,
        yield_pct=5.0,
        buy_price=9750.0,
    )
    fields.update(overrides)
    return Treasury(**fields)


def test_treasury_profit_loss_falls_back_to_face_amount():
    assert _treasury().profit_loss == 250
    assert _treasury(current_value=9800.0).profit_loss == 50
    assert _treasury(current_value=9800.0, exit_price=9900.0).profit_loss == 150


def test_treasury_roi_and_interest():
    treasury = _treasury()
    assert treasury.roi == pytest.approx(250 / 9750 * 100)
    assert treasury.interest == 0
    assert treasury.is_active

    sold = _treasury(exit_price=9990.0)
    assert sold.interest == 240
    assert not sold.is_active
    assert sold.days_remaining(date(2024, 3, 1)) == 0


def test_treasury_days_remaining():
    assert _treasury().days_remaining(date(2024, 6, 1)) == 30


def test_metric_types_are_the_eight_aggregates_in_write_order():
    assert [t.value for t in MetricType] == [
        "TreasuryValue",
        "LongValue",
        "LongCount",
        "PutExposure",
        "OpenPutPremium",
        "OpenPutCount",
        "OpenCallPremium",
        "OpenCallCount",
    ]

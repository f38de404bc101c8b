"""Tests for long position, dividend, treasury, symbol and setting operations."""

import logging
from datetime import date

import pytest

from wheeler.core.exceptions import ConflictError, NotFoundError, ValidationError
from wheeler.domain import (
    DividendOperations,
    LongPositionOperations,
    OptionOperations,
    SettingOperations,
    SymbolOperations,
    TreasuryOperations,
)


# Long positions

def test_long_position_close_by_id(session):
    position = LongPositionOperations.create(session, "AAPL", date(2024, 3, 1), 25, 150.0)
    closed = LongPositionOperations.close_by_id(session, position.id, date(2024, 3, 15), 155.0)
    assert closed.closed == date(2024, 3, 15)
    assert closed.exit_price == 155.0
    assert closed.realized_gain == 125


def test_long_position_close_rules(session):
    position = LongPositionOperations.create(session, "AAPL", date(2024, 3, 1), 25, 150.0)

    with pytest.raises(ValidationError):
        LongPositionOperations.close_by_id(session, position.id, date(2024, 2, 28), 155.0)

    LongPositionOperations.close_by_id(session, position.id, date(2024, 3, 1), 151.0)
    with pytest.raises(ValidationError):
        LongPositionOperations.close_by_id(session, position.id, date(2024, 3, 2), 152.0)

    with pytest.raises(NotFoundError):
        LongPositionOperations.close_by_id(session, 12345, date(2024, 3, 2), 152.0)


def test_long_position_business_key_close_and_delete(session):
    LongPositionOperations.create(session, "TSLA", date(2024, 4, 1), 50, 250.0)
    closed = LongPositionOperations.close(session, "tsla", date(2024, 4, 1), 50, 250.0, date(2024, 5, 1), 260.0)
    assert closed.exit_price == 260.0

    assert LongPositionOperations.delete(session, "TSLA", date(2024, 4, 1), 50, 250.0) == 1
    with pytest.raises(NotFoundError):
        LongPositionOperations.delete(session, "TSLA", date(2024, 4, 1), 50, 250.0)


@pytest.mark.parametrize(
    "shares, buy_price, closed, exit_price, field",
    [
        (0, 150.0, None, None, "shares"),
        (10, 0, None, None, "buy_price"),
        (10, 150.0, date(2024, 3, 2), None, "exit_price"),
        (10, 150.0, None, 160.0, "closed"),
        (10, 150.0, date(2024, 2, 1), 160.0, "closed"),
    ],
)
def test_long_position_validation(session, shares, buy_price, closed, exit_price, field):
    with pytest.raises(ValidationError) as exc:
        LongPositionOperations.create(session, "AAPL", date(2024, 3, 1), shares, buy_price, closed, exit_price)
    assert exc.value.field == field


def test_open_positions_and_update(session):
    kept = LongPositionOperations.create(session, "AAPL", date(2024, 3, 1), 100, 150.0)
    sold = LongPositionOperations.create(session, "MSFT", date(2024, 3, 1), 10, 400.0)
    LongPositionOperations.close_by_id(session, sold.id, date(2024, 3, 10), 410.0)

    assert [p.id for p in LongPositionOperations.get_open_positions(session)] == [kept.id]

    updated = LongPositionOperations.update_by_id(session, kept.id, "AAPL", date(2024, 3, 1), 200, 149.0)
    assert updated.shares == 200
    assert LongPositionOperations.delete_by_symbol(session, "MSFT") == 1


# Dividends

def test_dividend_duplicate_is_conflict(session):
    DividendOperations.create(session, "AAPL", date(2024, 2, 20), 40.75)
    with pytest.raises(ConflictError):
        DividendOperations.create(session, "AAPL", date(2024, 2, 20), 40.75)


def test_dividend_amount_must_be_positive(session):
    with pytest.raises(ValidationError):
        DividendOperations.create(session, "AAPL", date(2024, 2, 20), 0)


@pytest.mark.parametrize(
    "amount, matches",
    [
        (40.75, True),
        (40.7509, True),
        (40.7491, True),
        (40.752, False),
        (40.74, False),
    ],
)
def test_dividend_delete_tolerance(session, amount, matches):
    DividendOperations.create(session, "AAPL", date(2024, 2, 20), 40.75)
    if matches:
        assert DividendOperations.delete(session, "AAPL", date(2024, 2, 20), amount) == 1
        assert DividendOperations.get_all(session) == []
    else:
        with pytest.raises(NotFoundError):
            DividendOperations.delete(session, "AAPL", date(2024, 2, 20), amount)
        assert len(DividendOperations.get_all(session)) == 1


def test_dividend_delete_requires_same_received_date(session):
    DividendOperations.create(session, "AAPL", date(2024, 2, 20), 40.75)
    with pytest.raises(NotFoundError):
        DividendOperations.delete(session, "AAPL", date(2024, 2, 21), 40.75)


def test_dividend_queries(session):
    DividendOperations.create(session, "AAPL", date(2024, 2, 20), 40.75)
    DividendOperations.create(session, "AAPL", date(2024, 5, 20), 41.25)
    DividendOperations.create(session, "KO", date(2024, 4, 1), 12.0)

    assert DividendOperations.get_total_for_symbol(session, "AAPL") == pytest.approx(82.0)
    assert DividendOperations.get_total_for_symbol(session, "MSFT") == 0.0
    in_range = DividendOperations.get_by_date_range(session, date(2024, 3, 1), date(2024, 5, 20))
    assert [(d.symbol, d.received) for d in in_range] == [("KO", date(2024, 4, 1)), ("AAPL", date(2024, 5, 20))]
    aapl_only = DividendOperations.get_by_date_range(session, date(2024, 1, 1), date(2024, 12, 31), symbol="aapl")
    assert [d.received for d in aapl_only] == [date(2024, 2, 20), date(2024, 5, 20)]
    assert DividendOperations.get_by_date_range(session, date(2024, 1, 1), date(2024, 12, 31), symbol="MSFT") == []
    assert [d.received for d in DividendOperations.get_by_symbol(session, "AAPL")] == [
        date(2024, 5, 20),
        date(2024, 2, 20),
    ]
    assert DividendOperations.delete_by_symbol(session, "AAPL") == 2


# Treasuries

def _treasury(session, cuspid="912797GK1", **overrides):
    fields = dict(
        purchased=date(2024, 1, 1),
        maturity=date(2024, 7, 1),
        amount=10000.0,
        yield_pct=5.1,
        buy_price=9750.0,
    )
    fields.update(overrides)
    return TreasuryOperations.create(session, cuspid, **fields)


def test_treasury_create_and_lookup(session):
    _treasury(session)
    treasury = TreasuryOperations.get_by_cuspid(session, "912797GK1")
    assert treasury.yield_pct == 5.1
    assert treasury.is_active


@pytest.mark.parametrize(
    "cuspid, overrides, field",
    [
        ("", {}, "cuspid"),
        ("X1", {"amount": 0}, "amount"),
        ("X1", {"yield_pct": -1}, "yield"),
        ("X1", {"buy_price": 0}, "buy_price"),
        ("X1", {"maturity": date(2023, 12, 31)}, "maturity"),
    ],
)
def test_treasury_validation(session, cuspid, overrides, field):
    with pytest.raises(ValidationError) as exc:
        _treasury(session, cuspid, **overrides)
    assert exc.value.field == field


def test_treasury_duplicate_cuspid_is_conflict(session):
    _treasury(session)
    with pytest.raises(ConflictError):
        _treasury(session)


def test_treasury_update_and_open_value(session):
    _treasury(session, "A1", amount=10000.0)
    _treasury(session, "B2", amount=5000.0)
    assert TreasuryOperations.get_total_open_value(session) == 15000.0

    TreasuryOperations.update(session, "B2", current_value=4990.0, exit_price=4995.0)
    assert TreasuryOperations.get_total_open_value(session) == 10000.0

    full = TreasuryOperations.update_full(
        session, "A1", date(2024, 1, 2), date(2024, 8, 1), 12000.0, 4.9, 11700.0
    )
    assert full.amount == 12000.0

    TreasuryOperations.delete(session, "A1")
    with pytest.raises(NotFoundError):
        TreasuryOperations.delete(session, "A1")
    with pytest.raises(NotFoundError):
        TreasuryOperations.update(session, "A1", current_value=1.0)


def test_treasury_create_full_with_exit(session):
    treasury = TreasuryOperations.create_full(
        session, "C3", date(2024, 1, 1), date(2024, 4, 1), 1000.0, 5.0, 985.0, exit_price=1000.0
    )
    assert not treasury.is_active
    assert treasury.interest == 15.0


# Symbols

def test_symbol_create_normalizes_and_rejects_duplicates(session):
    symbol = SymbolOperations.create(session, " aapl ")
    assert symbol.symbol == "AAPL"
    assert symbol.currency == "USD"
    with pytest.raises(ConflictError):
        SymbolOperations.create(session, "AAPL")


def test_symbol_currency_validation(session):
    SymbolOperations.create(session, "SAP", currency="eur")
    with pytest.raises(ValidationError):
        SymbolOperations.update_currency(session, "SAP", "XXX")
    assert SymbolOperations.update_currency(session, "SAP", "CHF").currency == "CHF"
    with pytest.raises(NotFoundError):
        SymbolOperations.update_currency(session, "NOPE", "USD")


def test_symbol_market_data(session):
    SymbolOperations.create(session, "KO")
    row = SymbolOperations.update_market_data(session, "KO", price=61.2, dividend=1.94, ex_dividend_date="2024-06-14", pe_ratio=24.1)
    assert row.price == 61.2
    assert row.ex_dividend_date == date(2024, 6, 14)


def test_symbol_delete_blocked_while_referenced(session):
    OptionOperations.create(session, "TSLA", "Put", date(2024, 2, 10), 200.0, date(2024, 3, 15), 2.0, 1)
    with pytest.raises(ConflictError):
        SymbolOperations.delete(session, "TSLA")

    OptionOperations.delete_by_symbol(session, "TSLA")
    SymbolOperations.delete(session, "TSLA")
    assert SymbolOperations.get_by_symbol(session, "TSLA") is None


def test_distinct_symbols_unions_instruments(session):
    SymbolOperations.create(session, "ZZZ")
    LongPositionOperations.create(session, "AAPL", date(2024, 3, 1), 10, 150.0)
    DividendOperations.create(session, "KO", date(2024, 4, 1), 12.0)
    assert SymbolOperations.get_distinct_symbols(session) == ["AAPL", "KO", "ZZZ"]


# Settings

def test_settings_names_are_normalized(session):
    SettingOperations.create(session, " polygon_api_key ", "abc", "Market data key")
    setting = SettingOperations.get_by_name(session, "POLYGON_API_KEY")
    assert setting.name == "POLYGON_API_KEY"
    assert SettingOperations.get_value(session, "polygon_api_key") == "abc"


def test_settings_empty_values_stored_as_null(session):
    setting = SettingOperations.create(session, "THEME", "", "")
    assert setting.value is None
    assert setting.description is None
    assert SettingOperations.get_value_with_default(session, "THEME", "dark") == "dark"


def test_settings_empty_name_rejected(session):
    with pytest.raises(ValidationError):
        SettingOperations.create(session, "   ", "x")


def test_settings_upsert_and_set_value(session):
    SettingOperations.upsert(session, "refresh", "daily", "How often")
    SettingOperations.upsert(session, "refresh", "weekly", "How often")
    assert SettingOperations.get_value(session, "REFRESH") == "weekly"

    SettingOperations.set_value(session, "refresh", "hourly")
    row = SettingOperations.get_by_name(session, "refresh")
    assert row.value == "hourly"
    assert row.description == "How often"

    SettingOperations.set_value(session, "new_key", "1")
    assert [s.name for s in SettingOperations.get_all(session)] == ["NEW_KEY", "REFRESH"]


def test_first_set_value_logs_no_warning(session, caplog):
    with caplog.at_level(logging.WARNING):
        SettingOperations.set_value(session, "first_run", "done")
    assert SettingOperations.get_value(session, "FIRST_RUN") == "done"
    assert [r for r in caplog.records if r.levelno >= logging.WARNING] == []


def test_settings_update_and_delete_missing(session):
    with pytest.raises(NotFoundError):
        SettingOperations.update(session, "missing", "x")
    with pytest.raises(NotFoundError):
        SettingOperations.delete(session, "missing")

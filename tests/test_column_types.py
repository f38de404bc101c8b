"""Tests for how date and timestamp columns are stored and read back."""

from datetime import date, datetime

import pytest
from sqlalchemy import DateTime, text

from wheeler.domain import (
    DividendOperations,
    LongPositionOperations,
    MetricOperations,
    OptionOperations,
    SymbolOperations,
    TreasuryOperations,
)
from wheeler.models import Dividend, Metric, Option, SchemaMigration, Treasury

STORED_FORMS = [
    "2024-03-15",
    "2024-03-15 00:00:00",
    "2024-03-15T00:00:00",
    "2024-03-15T00:00:00Z",
]


def _insert(session, sql, **params):
    session.connection().execute(text(sql), params)
    session.commit()
    session.expire_all()


# Timestamps

@pytest.mark.parametrize(
    "model, column",
    [
        (Metric, "created"),
        (SchemaMigration, "applied_at"),
        (Option, "created_at"),
        (Option, "updated_at"),
        (Treasury, "created_at"),
        (Dividend, "created_at"),
    ],
)
def test_timestamp_columns_are_naive(model, column):
    column_type = model.__table__.c[column].type
    assert type(column_type) is DateTime
    assert column_type.timezone is False


def test_naive_timestamps_are_written_and_read_back(session):
    row = MetricOperations.create(session, "TreasuryValue", 1000.0, created=datetime(2024, 3, 1, 16, 30))
    session.expire_all()

    stored = MetricOperations.get_by_id(session, row.id)
    assert stored.created == datetime(2024, 3, 1, 16, 30)
    assert stored.created.tzinfo is None


def test_created_at_is_stamped_on_insert(session):
    option = OptionOperations.create(session, "AAPL", "Put", date(2024, 3, 1), 150.0, date(2024, 3, 15), 2.5, 1)
    session.expire_all()

    stored = OptionOperations.get_by_id(session, option.id)
    assert isinstance(stored.created_at, datetime)
    assert stored.created_at.tzinfo is None


# Dates written by other tools

@pytest.mark.parametrize("stored", STORED_FORMS)
def test_option_dates_read_in_any_stored_form(session, stored):
    SymbolOperations.ensure(session, "AAPL")
    _insert(
        session,
        "INSERT INTO options (symbol, type, opened, closed, strike, expiration, premium, contracts,"
        " exit_price, commission, created_at)"
        " VALUES ('AAPL', 'Put', :day, :day, 150, :day, 2.5, 1, 0.1, 1.3, '2024-03-15 09:30:00')",
        day=stored,
    )

    [option] = OptionOperations.get_all(session)
    assert option.opened == date(2024, 3, 15)
    assert option.closed == date(2024, 3, 15)
    assert option.expiration == date(2024, 3, 15)


@pytest.mark.parametrize("stored", STORED_FORMS)
def test_position_and_dividend_dates_read_in_any_stored_form(session, stored):
    SymbolOperations.ensure(session, "KO")
    _insert(
        session,
        "INSERT INTO long_positions (symbol, opened, closed, shares, buy_price, exit_price, created_at)"
        " VALUES ('KO', :day, NULL, 100, 60.0, NULL, '2024-03-15 09:30:00')",
        day=stored,
    )
    _insert(
        session,
        "INSERT INTO dividends (symbol, received, amount) VALUES ('KO', :day, 48.5)",
        day=stored,
    )

    [position] = LongPositionOperations.get_all(session)
    assert position.opened == date(2024, 3, 15)
    assert position.closed is None
    [dividend] = DividendOperations.get_all(session)
    assert dividend.received == date(2024, 3, 15)


@pytest.mark.parametrize("stored", STORED_FORMS)
def test_treasury_and_symbol_dates_read_in_any_stored_form(session, stored):
    SymbolOperations.ensure(session, "MSFT")
    _insert(
        session,
        'INSERT INTO treasuries (cuspid, purchased, maturity, amount, "yield", buy_price, created_at)'
        " VALUES ('912797GK1', :day, '2024-09-15T00:00:00Z', 10000, 5.1, 9750, '2024-03-15 09:30:00')",
        day=stored,
    )
    _insert(session, "UPDATE symbols SET ex_dividend_date = :day WHERE symbol = 'MSFT'", day=stored)

    [treasury] = TreasuryOperations.get_all(session)
    assert treasury.purchased == date(2024, 3, 15)
    assert treasury.maturity == date(2024, 9, 15)
    assert SymbolOperations.get_by_symbol(session, "MSFT").ex_dividend_date == date(2024, 3, 15)


def test_dates_are_written_in_plain_form(session):
    DividendOperations.create(session, "KO", date(2024, 4, 1), 12.0)
    stored = session.connection().execute(text("SELECT received FROM dividends")).scalar()
    assert stored == "2024-04-01"

"""Tests for boundary date parsing, currency formatting and the error taxonomy."""

from datetime import date, datetime, timezone

import pytest

from wheeler.core.currency import (
    CURRENCIES,
    format_currency,
    get_currency,
    get_currency_name,
    is_valid_currency,
)
from wheeler.core.dates import coerce_date, coerce_optional_date, format_date, parse_date, parse_timestamp
from wheeler.core.exceptions import (
    BackendError,
    ConflictError,
    NotFoundError,
    OperationCancelled,
    ValidationError,
    WheelerError,
)


def test_parse_date_accepts_plain_and_iso_variants():
    assert parse_date("2024-03-15") == date(2024, 3, 15)
    assert parse_date("2024-03-15T10:20:30Z") == date(2024, 3, 15)
    assert parse_date(" 2024-03-15 00:00:00 ") == date(2024, 3, 15)


def test_parse_date_rejects_garbage_with_field_name():
    with pytest.raises(ValidationError) as exc:
        parse_date("15/03/2024", field="opened", entity="option")
    assert exc.value.field == "opened"
    assert exc.value.entity == "option"
    assert "opened" in str(exc.value)


def test_parse_timestamp_tolerates_sqlite_zone_and_nanoseconds():
    assert parse_timestamp("2024-03-15 10:20:30") == datetime(2024, 3, 15, 10, 20, 30)
    assert parse_timestamp("2024-03-15T10:20:30Z") == datetime(2024, 3, 15, 10, 20, 30, tzinfo=timezone.utc)
    nanos = parse_timestamp("2024-03-15T10:20:30.123456789Z")
    assert nanos.microsecond == 123456
    assert parse_timestamp("2024-03-15") == datetime(2024, 3, 15)


def test_coerce_date_inputs():
    assert coerce_date(datetime(2024, 1, 2, 15, 0), "opened") == date(2024, 1, 2)
    assert coerce_date(date(2024, 1, 2), "opened") == date(2024, 1, 2)
    assert coerce_date("2024-01-02", "opened") == date(2024, 1, 2)
    with pytest.raises(ValidationError):
        coerce_date(20240102, "opened")
    with pytest.raises(ValidationError):
        coerce_date(None, "opened")


def test_coerce_optional_date_blank_is_none():
    assert coerce_optional_date(None, "closed") is None
    assert coerce_optional_date("  ", "closed") is None
    assert coerce_optional_date("2024-05-01", "closed") == date(2024, 5, 1)


def test_format_date():
    assert format_date(date(2024, 1, 5)) == "2024-01-05"
    assert format_date(datetime(2024, 1, 5, 12, 0)) == "2024-01-05"
    assert format_date(None) is None


def test_currency_table_has_all_recognized_codes():
    codes = {c.code for c in CURRENCIES}
    assert codes == {
        "USD", "EUR", "GBP", "JPY", "CHF", "CAD", "AUD", "NZD", "CNY", "HKD", "SGD",
        "INR", "MXN", "BRL", "KRW", "SEK", "NOK", "DKK", "PLN", "RUB", "ZAR", "TRY",
    }
    assert is_valid_currency("EUR")
    assert not is_valid_currency("XXX")


def test_currency_lookup_defaults():
    assert get_currency_name("GBP") == "British Pound"
    assert get_currency_name("XXX") == "Unknown"
    assert get_currency("XXX").code == "USD"


def test_format_currency_places_symbol_and_rounds():
    assert format_currency(1234.6) == "$1235"
    assert format_currency(99.4, "EUR").startswith("99")
    assert format_currency(99.4, "EUR").endswith("€")
    assert format_currency(10, "XXX") == "$10"


@pytest.mark.parametrize(
    "error_class, kind",
    [
        (ValidationError, "validation"),
        (NotFoundError, "not-found"),
        (ConflictError, "conflict"),
        (BackendError, "backend"),
        (OperationCancelled, "cancelled"),
    ],
)
def test_error_kinds(error_class, kind):
    error = error_class("boom", entity="option", field="strike")
    assert isinstance(error, WheelerError)
    assert error.kind == kind
    assert error.field == "strike"

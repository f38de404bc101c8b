"""Tests for treasury and open-option summaries."""

from datetime import date

import pytest

from wheeler.analytics import open_option_details, summarize_open_options, summarize_treasuries


def test_summarize_treasuries(make_treasury):
    treasuries = [
        make_treasury("T1", date(2024, 1, 2), 1000.0, buy_price=970.0),
        make_treasury("T2", date(2024, 1, 2), 2000.0, buy_price=1940.0, exit_price=2000.0),
    ]
    summary = summarize_treasuries(treasuries)

    assert summary.total_amount == 3000.0
    assert summary.total_buy_price == 2910.0
    assert summary.total_profit_loss == pytest.approx(90.0)
    assert summary.total_interest == pytest.approx(60.0)
    assert summary.active_positions == 1
    assert summary.average_return == pytest.approx(60.0 / 2910.0 * 100)


def test_summarize_treasuries_empty():
    summary = summarize_treasuries([])
    assert summary.average_return == 0
    assert summary.active_positions == 0


def test_summarize_open_options(make_option):
    options = [
        make_option(1, "TSLA", "Put", date(2024, 2, 1), date(2024, 3, 15), premium=5.0),
        make_option(2, "AAPL", "Put", date(2024, 2, 1), date(2024, 3, 15), premium=3.5),
        make_option(3, "AAPL", "Call", date(2024, 2, 1), date(2024, 3, 15), premium=2.0),
        make_option(4, "MSFT", "Put", date(2024, 2, 1), date(2024, 3, 15), premium=9.0, closed=date(2024, 2, 5), exit_price=1.0),
    ]
    rows = summarize_open_options(options)

    assert [row.symbol for row in rows] == ["AAPL", "TSLA", "Total"]
    aapl, tsla, total = rows
    assert (aapl.put_count, aapl.call_count, aapl.total_count) == (1, 1, 2)
    assert aapl.total_premium == pytest.approx(5.5)
    assert (tsla.put_count, tsla.call_count) == (1, 0)
    assert (total.put_count, total.call_count) == (2, 1)
    assert total.put_premium == pytest.approx(8.5)


def test_open_option_details(make_option):
    today = date(2024, 3, 1)
    options = [
        make_option(1, "AAPL", "Put", date(2024, 1, 2), date(2024, 5, 17), strike=140.0, contracts=2),
        make_option(2, "AAPL", "Put", date(2024, 1, 2), date(2024, 3, 5), strike=150.0),
        make_option(3, "TSLA", "Call", date(2024, 1, 2), date(2024, 3, 20), strike=270.0),
        make_option(4, "MSFT", "Put", date(2024, 1, 2), date(2024, 2, 28), strike=400.0),
        make_option(5, "KO", "Put", date(2024, 1, 2), date(2024, 3, 5), closed=date(2024, 2, 1), exit_price=0.1),
    ]
    report = open_option_details(options, today)

    assert [d.option.id for d in report.details] == [4, 2, 3, 1]
    assert [d.status for d in report.details] == ["Expired", "Critical", "Warning", "Active"]
    assert [d.days_to_expiration for d in report.details] == [-2, 4, 19, 77]
    assert report.details[-1].exposure == 28000.0
    assert report.details[2].exposure == 0
    assert [d.option.id for d in report.by_status("Critical")] == [2]

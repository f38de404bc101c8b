"""Monthly Aggregator - Folds instruments into a 12-month x symbol matrix.

Realization rules:
- Option premium: realized at `opened`, (premium - exit_price or 0) x contracts x 100.
  Open options count as if held to expiration.
- Capital gains: closed long positions only, at `closed`, (exit - buy) x shares.
- Dividends: at `received`, the amount.

Months fold across years: January 2024 and January 2025 share slot 0. The
distinct contributing year-months are reported in `year_months` so a
presentation layer can say which years were summed.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Set, Tuple

from wheeler.models import CALL, PUT, Dividend, LongPosition, Option

MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def _months() -> List[float]:
    return [0.0] * 12


def year_month_label(year: int, month: int) -> str:
    """'2025 Jan' style label."""
    return f"{year} {MONTH_NAMES[month - 1]}"


@dataclass
class MonthlyRow:
    """One table row: a symbol's 12 month slots (premiums, gains and dividends mingled)."""

    symbol: str
    months: List[float] = field(default_factory=_months)

    @property
    def total(self) -> float:
        return sum(self.months)


@dataclass
class MonthlyReport:
    """Output of build_monthly_report. Month arrays are indexed 0 (Jan) .. 11 (Dec)."""

    puts_by_month: List[float] = field(default_factory=_months)
    calls_by_month: List[float] = field(default_factory=_months)
    capgains_by_month: List[float] = field(default_factory=_months)
    dividends_by_month: List[float] = field(default_factory=_months)

    puts_by_symbol: Dict[str, float] = field(default_factory=dict)
    calls_by_symbol: Dict[str, float] = field(default_factory=dict)
    capgains_by_symbol: Dict[str, float] = field(default_factory=dict)
    dividends_by_symbol: Dict[str, float] = field(default_factory=dict)

    table: List[MonthlyRow] = field(default_factory=list)

    # Per month: symbol -> option premium (puts + calls)
    premiums_by_month_symbol: List[Dict[str, float]] = field(default_factory=lambda: [{} for _ in range(12)])

    year_months: List[str] = field(default_factory=list)

    @property
    def month_totals(self) -> List[float]:
        """Sum of the four month-indexed arrays, per month."""
        return [
            self.puts_by_month[i] + self.calls_by_month[i] + self.capgains_by_month[i] + self.dividends_by_month[i]
            for i in range(12)
        ]

    @property
    def column_totals(self) -> List[float]:
        """Per-month totals over the table rows."""
        return [sum(row.months[i] for row in self.table) for i in range(12)]

    @property
    def grand_total(self) -> float:
        return sum(self.month_totals)

    def labelled_totals(self) -> List[Tuple[str, float]]:
        return list(zip(MONTH_NAMES, self.month_totals))

    def stacked_premiums(self) -> List[Dict[str, object]]:
        """Stacked chart data: per month, symbols with a positive premium (ascending ticker)."""
        return [
            {
                "month": MONTH_NAMES[i],
                "symbols": [
                    {"symbol": symbol, "amount": amount}
                    for symbol, amount in sorted(self.premiums_by_month_symbol[i].items())
                    if amount > 0
                ],
            }
            for i in range(12)
        ]

    @staticmethod
    def ticker_series(by_symbol: Dict[str, float]) -> List[Tuple[str, float]]:
        """Non-zero per-ticker amounts, ascending ticker."""
        return [(symbol, amount) for symbol, amount in sorted(by_symbol.items()) if amount != 0]


def build_monthly_report(
    options: Iterable[Option],
    positions: Iterable[LongPosition],
    dividends: Iterable[Dividend],
) -> MonthlyReport:
    """Bucket every instrument into its realization month.

    Table rows whose slots are all zero are omitted; rows are sorted by symbol.
    """
    report = MonthlyReport()
    rows: Dict[str, MonthlyRow] = {}
    year_months: Set[Tuple[int, int]] = set()

    def record(symbol: str, when: date, amount: float) -> int:
        index = when.month - 1
        rows.setdefault(symbol, MonthlyRow(symbol=symbol)).months[index] += amount
        year_months.add((when.year, when.month))
        return index

    for option in options:
        amount = option.realized_premium
        index = record(option.symbol, option.opened, amount)

        if option.type == PUT:
            report.puts_by_month[index] += amount
            report.puts_by_symbol[option.symbol] = report.puts_by_symbol.get(option.symbol, 0.0) + amount
        elif option.type == CALL:
            report.calls_by_month[index] += amount
            report.calls_by_symbol[option.symbol] = report.calls_by_symbol.get(option.symbol, 0.0) + amount

        premiums = report.premiums_by_month_symbol[index]
        premiums[option.symbol] = premiums.get(option.symbol, 0.0) + amount

    for position in positions:
        if position.closed is None or position.exit_price is None:
            continue
        amount = position.realized_gain
        index = record(position.symbol, position.closed, amount)
        report.capgains_by_month[index] += amount
        report.capgains_by_symbol[position.symbol] = report.capgains_by_symbol.get(position.symbol, 0.0) + amount

    for dividend in dividends:
        index = record(dividend.symbol, dividend.received, dividend.amount)
        report.dividends_by_month[index] += dividend.amount
        report.dividends_by_symbol[dividend.symbol] = (
            report.dividends_by_symbol.get(dividend.symbol, 0.0) + dividend.amount
        )

    report.table = [row for _, row in sorted(rows.items()) if any(row.months)]
    report.year_months = [year_month_label(year, month) for year, month in sorted(year_months)]
    return report

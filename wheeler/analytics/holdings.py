"""Holdings summaries: treasuries, open options by symbol, option expiration status."""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List

from wheeler.models import CALL, PUT, Option, Treasury

TOTAL_ROW = "Total"


@dataclass
class TreasurySummary:
    total_amount: float = 0.0
    total_buy_price: float = 0.0
    total_profit_loss: float = 0.0
    total_interest: float = 0.0
    active_positions: int = 0

    @property
    def average_return(self) -> float:
        """Interest earned as a percentage of everything paid."""
        if self.total_buy_price > 0:
            return self.total_interest / self.total_buy_price * 100
        return 0.0


def summarize_treasuries(treasuries: Iterable[Treasury]) -> TreasurySummary:
    summary = TreasurySummary()
    for treasury in treasuries:
        summary.total_amount += treasury.amount
        summary.total_buy_price += treasury.buy_price
        summary.total_profit_loss += treasury.profit_loss
        summary.total_interest += treasury.interest
        if treasury.is_active:
            summary.active_positions += 1
    return summary


@dataclass
class OptionSymbolSummary:
    """Open option counts and per-share premium sums for one ticker (or the Total row)."""

    symbol: str
    put_count: int = 0
    call_count: int = 0
    put_premium: float = 0.0
    call_premium: float = 0.0

    @property
    def total_count(self) -> int:
        return self.put_count + self.call_count

    @property
    def total_premium(self) -> float:
        return self.put_premium + self.call_premium

    def add(self, option: Option) -> None:
        if option.type == PUT:
            self.put_count += 1
            self.put_premium += option.premium
        elif option.type == CALL:
            self.call_count += 1
            self.call_premium += option.premium


def summarize_open_options(options: Iterable[Option]) -> List[OptionSymbolSummary]:
    """Per-symbol rows over open options, ascending ticker, followed by a 'Total' row."""
    rows: Dict[str, OptionSymbolSummary] = {}
    total = OptionSymbolSummary(symbol=TOTAL_ROW)
    for option in options:
        if option.closed is not None:
            continue
        rows.setdefault(option.symbol, OptionSymbolSummary(symbol=option.symbol)).add(option)
        total.add(option)
    return [rows[s] for s in sorted(rows)] + [total]


@dataclass
class OpenOptionDetail:
    option: Option
    days_to_expiration: int
    status: str
    exposure: float
    notional_premium: float


@dataclass
class ExpirationReport:
    details: List[OpenOptionDetail] = field(default_factory=list)

    def by_status(self, status: str) -> List[OpenOptionDetail]:
        return [d for d in self.details if d.status == status]


def open_option_details(options: Iterable[Option], today: date) -> ExpirationReport:
    """Open options with days to expiration and status, soonest expiration first."""
    details = [
        OpenOptionDetail(
            option=option,
            days_to_expiration=option.days_to_expiration(today),
            status=option.expiration_status(today),
            exposure=option.exposure,
            notional_premium=option.notional_premium,
        )
        for option in options
        if option.closed is None
    ]
    details.sort(key=lambda d: (d.option.expiration, d.option.symbol, d.option.id or 0))
    return ExpirationReport(details=details)

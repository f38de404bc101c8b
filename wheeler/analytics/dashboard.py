"""Dashboard Roll-up - Per-symbol summaries and portfolio totals for the live state."""

from dataclasses import asdict, dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from wheeler.models import CALL, PUT, CONTRACT_MULTIPLIER, Dividend, LongPosition, Option, Symbol, Treasury

CHART_COLORS = ["#FF6384", "#36A2EB", "#FFCE56", "#4BC0C0", "#9966FF", "#FF9F40"]

LONG_STOCK_COLOR = "#36A2EB"
PUT_EXPOSURE_COLOR = "#FF6384"
TREASURIES_COLOR = "#FFCE56"
CALL_COVERED_COLOR = "#36A2EB"
OPTIONABLE_COLOR = "#FFCE56"

# Shares needed to write one covered call
OPTIONABLE_MIN_SHARES = CONTRACT_MULTIPLIER


@dataclass
class SymbolSummary:
    symbol: str
    current_price: float = 0.0
    long_amount: float = 0.0
    put_exposed: float = 0.0
    puts: float = 0.0
    calls: float = 0.0
    cap_gains: float = 0.0
    dividends: float = 0.0
    optionable: float = 0.0

    @property
    def net(self) -> float:
        return self.puts + self.calls + self.cap_gains + self.dividends

    @property
    def cash_on_cash(self) -> float:
        if self.long_amount > 0:
            return self.net / self.long_amount * 100
        return 0.0

    @property
    def has_activity(self) -> bool:
        return any(
            value != 0
            for value in (self.long_amount, self.put_exposed, self.puts, self.calls, self.cap_gains, self.dividends)
        )

    def to_dict(self) -> dict:
        result = asdict(self)
        result.update(net=self.net, cash_on_cash=self.cash_on_cash)
        return result


@dataclass
class DashboardTotals:
    total_long: float = 0.0
    total_puts: float = 0.0  # Put exposure
    total_treasuries: float = 0.0
    total_put_premiums: float = 0.0
    total_call_premiums: float = 0.0
    total_cap_gains: float = 0.0
    total_dividends: float = 0.0
    total_optionable: float = 0.0

    @property
    def total_net(self) -> float:
        return self.total_put_premiums + self.total_call_premiums + self.total_cap_gains + self.total_dividends

    @property
    def overall_cash_on_cash(self) -> float:
        if self.total_long > 0:
            return self.total_net / self.total_long * 100
        return 0.0

    @property
    def put_roi(self) -> float:
        if self.total_puts > 0:
            return self.total_put_premiums / self.total_puts * 100
        return 0.0

    @property
    def long_roi(self) -> float:
        if self.total_long > 0:
            return self.total_call_premiums / self.total_long * 100
        return 0.0

    @property
    def grand_total(self) -> float:
        """Capital deployed: long + put exposure + treasuries (realized income excluded)."""
        return self.total_long + self.total_puts + self.total_treasuries

    def to_dict(self) -> dict:
        result = asdict(self)
        result.update(
            total_net=self.total_net,
            overall_cash_on_cash=self.overall_cash_on_cash,
            put_roi=self.put_roi,
            long_roi=self.long_roi,
            grand_total=self.grand_total,
        )
        return result


@dataclass
class ChartData:
    label: str
    value: float
    color: str


@dataclass
class Dashboard:
    summaries: List[SymbolSummary] = field(default_factory=list)
    totals: DashboardTotals = field(default_factory=DashboardTotals)
    long_by_ticker: List[ChartData] = field(default_factory=list)
    puts_by_ticker: List[ChartData] = field(default_factory=list)
    total_allocation: List[ChartData] = field(default_factory=list)
    calls_to_longs: List[ChartData] = field(default_factory=list)


def _call_covered_symbols(options: Iterable[Option]) -> Set[str]:
    return {o.symbol for o in options if o.type == CALL and o.closed is None}


def build_symbol_summaries(
    symbols: Iterable[Symbol],
    options: List[Option],
    positions: List[LongPosition],
    dividends: List[Dividend],
    extra_tickers: Optional[Iterable[str]] = None,
) -> List[SymbolSummary]:
    """Summarize each ticker; tickers with no activity are omitted.

    Args:
        symbols: Symbol rows (supply current price)
        options: All options
        positions: All long positions
        dividends: All dividends
        extra_tickers: Tickers to consider even without a Symbol row

    Returns:
        Summaries sorted by ticker
    """
    summaries: Dict[str, SymbolSummary] = {}
    for row in symbols:
        summaries[row.symbol] = SymbolSummary(symbol=row.symbol, current_price=row.price or 0.0)
    for ticker in extra_tickers or ():
        summaries.setdefault(ticker, SymbolSummary(symbol=ticker))

    def summary_for(ticker: str) -> SymbolSummary:
        return summaries.setdefault(ticker, SymbolSummary(symbol=ticker))

    covered = _call_covered_symbols(options)

    for position in positions:
        summary = summary_for(position.symbol)
        if position.closed is None:
            summary.long_amount += position.amount
            if position.symbol not in covered and position.shares >= OPTIONABLE_MIN_SHARES:
                summary.optionable += position.amount
        else:
            summary.cap_gains += position.realized_gain

    for option in options:
        summary = summary_for(option.symbol)
        if option.type == PUT:
            if option.closed is None:
                summary.put_exposed += option.exposure
            summary.puts += option.realized_premium
        else:
            summary.calls += option.realized_premium

    for dividend in dividends:
        summary_for(dividend.symbol).dividends += dividend.amount

    return [summaries[t] for t in sorted(summaries) if summaries[t].has_activity]


def calculate_totals(summaries: Iterable[SymbolSummary], treasuries: Iterable[Treasury]) -> DashboardTotals:
    """Sum summaries; treasuries count at face amount, sold or not."""
    totals = DashboardTotals()
    for summary in summaries:
        totals.total_long += summary.long_amount
        totals.total_puts += summary.put_exposed
        totals.total_put_premiums += summary.puts
        totals.total_call_premiums += summary.calls
        totals.total_cap_gains += summary.cap_gains
        totals.total_dividends += summary.dividends
        totals.total_optionable += summary.optionable
    totals.total_treasuries = sum(t.amount for t in treasuries)
    return totals


def _ticker_chart(amounts: Dict[str, float]) -> List[ChartData]:
    return [
        ChartData(label=ticker, value=amounts[ticker], color=CHART_COLORS[i % len(CHART_COLORS)])
        for i, ticker in enumerate(sorted(amounts))
    ]


def long_by_ticker_chart(positions: Iterable[LongPosition]) -> List[ChartData]:
    """Open long cost basis per ticker."""
    amounts: Dict[str, float] = {}
    for position in positions:
        if position.closed is None:
            amounts[position.symbol] = amounts.get(position.symbol, 0.0) + position.amount
    return _ticker_chart(amounts)


def puts_by_ticker_chart(options: Iterable[Option]) -> List[ChartData]:
    """Open put exposure per ticker."""
    amounts: Dict[str, float] = {}
    for option in options:
        if option.type == PUT and option.closed is None:
            amounts[option.symbol] = amounts.get(option.symbol, 0.0) + option.exposure
    return _ticker_chart(amounts)


def total_allocation_chart(
    positions: Iterable[LongPosition], options: Iterable[Option], treasuries: Iterable[Treasury]
) -> List[ChartData]:
    total_long = sum(p.amount for p in positions if p.closed is None)
    total_puts = sum(o.exposure for o in options if o.type == PUT and o.closed is None)
    total_treasuries = sum(t.amount for t in treasuries)
    return [
        ChartData(label="Long Stock", value=total_long, color=LONG_STOCK_COLOR),
        ChartData(label="Put Exposure", value=total_puts, color=PUT_EXPOSURE_COLOR),
        ChartData(label="Treasuries", value=total_treasuries, color=TREASURIES_COLOR),
    ]


def calls_to_longs_chart(positions: Iterable[LongPosition], options: Iterable[Option]) -> List[ChartData]:
    """Split open long value into call-covered and optionable (>= 100 shares, uncovered)."""
    covered = _call_covered_symbols(options)
    call_covered = 0.0
    optionable = 0.0
    for position in positions:
        if position.closed is not None:
            continue
        if position.symbol in covered:
            call_covered += position.amount
        elif position.shares >= OPTIONABLE_MIN_SHARES:
            optionable += position.amount
    return [
        ChartData(label="Call Covered", value=call_covered, color=CALL_COVERED_COLOR),
        ChartData(label="Optionable", value=optionable, color=OPTIONABLE_COLOR),
    ]


def build_dashboard(
    symbols: Iterable[Symbol],
    options: Iterable[Option],
    positions: Iterable[LongPosition],
    dividends: Iterable[Dividend],
    treasuries: Iterable[Treasury],
) -> Dashboard:
    """Assemble summaries, totals and chart series in one pass over fetched rows."""
    options = list(options)
    positions = list(positions)
    dividends = list(dividends)
    treasuries = list(treasuries)

    summaries = build_symbol_summaries(symbols, options, positions, dividends)
    return Dashboard(
        summaries=summaries,
        totals=calculate_totals(summaries, treasuries),
        long_by_ticker=long_by_ticker_chart(positions),
        puts_by_ticker=puts_by_ticker_chart(options),
        total_allocation=total_allocation_chart(positions, options, treasuries),
        calls_to_longs=calls_to_longs_chart(positions, options),
    )

"""Portfolio analytics over fetched instrument sets.

- options_index: composite multi-key index and filter queries
- point_in_time: activity predicate and daily aggregates
- snapshot: historical backfill into the metric log
- monthly: 12-month x symbol realization matrix
- dashboard: per-symbol summaries, totals and chart series
- holdings: treasury and open-option summaries
"""

from .options_index import DateRange, OptionFilter, OptionsIndex, OptionStatus, StrikeRange
from .point_in_time import (
    ActiveInstruments,
    PortfolioState,
    active_on,
    is_active_on,
    reconstruct,
    treasury_active_on,
)
from .snapshot import ComprehensiveSnapshot, SnapshotConfig, SnapshotResult, snapshot, snapshot_window
from .monthly import MONTH_NAMES, MonthlyReport, MonthlyRow, build_monthly_report
from .dashboard import (
    CHART_COLORS,
    ChartData,
    Dashboard,
    DashboardTotals,
    SymbolSummary,
    build_dashboard,
    build_symbol_summaries,
    calculate_totals,
)
from .holdings import (
    ExpirationReport,
    OptionSymbolSummary,
    TreasurySummary,
    open_option_details,
    summarize_open_options,
    summarize_treasuries,
)

__all__ = [
    "DateRange",
    "OptionFilter",
    "OptionsIndex",
    "OptionStatus",
    "StrikeRange",
    "ActiveInstruments",
    "PortfolioState",
    "active_on",
    "is_active_on",
    "reconstruct",
    "treasury_active_on",
    "ComprehensiveSnapshot",
    "SnapshotConfig",
    "SnapshotResult",
    "snapshot",
    "snapshot_window",
    "MONTH_NAMES",
    "MonthlyReport",
    "MonthlyRow",
    "build_monthly_report",
    "CHART_COLORS",
    "ChartData",
    "Dashboard",
    "DashboardTotals",
    "SymbolSummary",
    "build_dashboard",
    "build_symbol_summaries",
    "calculate_totals",
    "ExpirationReport",
    "OptionSymbolSummary",
    "TreasurySummary",
    "open_option_details",
    "summarize_open_options",
    "summarize_treasuries",
]

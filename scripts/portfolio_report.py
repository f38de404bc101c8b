#!/usr/bin/env python3
"""CLI script for printing portfolio reports from the active database.

Usage:
    # Dashboard: per-symbol summaries and totals
    python scripts/portfolio_report.py dashboard

    # Monthly realization matrix
    python scripts/portfolio_report.py monthly

    # Open options with expiration status
    python scripts/portfolio_report.py options

    # Treasury holdings summary
    python scripts/portfolio_report.py treasuries

    # Latest metric per kind and day
    python scripts/portfolio_report.py metrics

    # JSON output
    python scripts/portfolio_report.py dashboard --json
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from datetime import date

# Add project root to path
sys.path.insert(0, str(__file__).rsplit("/", 2)[0])

from wheeler.core.currency import format_currency
from wheeler.core.exceptions import WheelerError
from wheeler.db import database_path, get_engine, get_session_context
from wheeler.domain import (
    DividendOperations,
    LongPositionOperations,
    MetricOperations,
    OptionOperations,
    SymbolOperations,
    TreasuryOperations,
)
from wheeler.analytics import (
    MONTH_NAMES,
    build_dashboard,
    build_monthly_report,
    open_option_details,
    summarize_open_options,
    summarize_treasuries,
)


# ANSI color codes
class Colors:
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    BLUE = "\033[94m"
    BOLD = "\033[1m"
    RESET = "\033[0m"


STATUS_COLORS = {
    "Expired": Colors.RED,
    "Critical": Colors.RED,
    "Warning": Colors.YELLOW,
    "Active": Colors.GREEN,
}


def print_header(text: str) -> None:
    """Print a formatted section header."""
    print(f"\n{Colors.BOLD}{Colors.BLUE}{'=' * 60}{Colors.RESET}")
    print(f"{Colors.BOLD}{Colors.BLUE}{text}{Colors.RESET}")
    print(f"{Colors.BOLD}{Colors.BLUE}{'=' * 60}{Colors.RESET}\n")


def print_error(text: str) -> None:
    print(f"{Colors.RED}✗ {text}{Colors.RESET}")


def setup_logging(verbose: bool) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def report_dashboard(session, as_json: bool) -> None:
    dashboard = build_dashboard(
        SymbolOperations.get_all(session),
        OptionOperations.get_all(session),
        LongPositionOperations.get_all(session),
        DividendOperations.get_all(session),
        TreasuryOperations.get_all(session),
    )
    if as_json:
        print(json.dumps({
            "summaries": [s.to_dict() for s in dashboard.summaries],
            "totals": dashboard.totals.to_dict(),
            "long_by_ticker": [asdict(c) for c in dashboard.long_by_ticker],
            "puts_by_ticker": [asdict(c) for c in dashboard.puts_by_ticker],
            "total_allocation": [asdict(c) for c in dashboard.total_allocation],
            "calls_to_longs": [asdict(c) for c in dashboard.calls_to_longs],
        }, indent=2, default=str))
        return

    print_header("Dashboard")
    print(f"  {'Symbol':6}  {'Long':>10}  {'PutExp':>10}  {'Puts':>9}  {'Calls':>9}  {'CapGain':>9}  {'Divs':>8}  {'CoC%':>6}")
    for s in dashboard.summaries:
        print(
            f"  {s.symbol:6}  {s.long_amount:>10,.0f}  {s.put_exposed:>10,.0f}  {s.puts:>9,.0f}"
            f"  {s.calls:>9,.0f}  {s.cap_gains:>9,.0f}  {s.dividends:>8,.0f}  {s.cash_on_cash:>6.1f}"
        )

    t = dashboard.totals
    print(f"\n  Long:        {format_currency(t.total_long)}")
    print(f"  Put exposure: {format_currency(t.total_puts)}")
    print(f"  Treasuries:  {format_currency(t.total_treasuries)}")
    print(f"  Grand total: {Colors.BOLD}{format_currency(t.grand_total)}{Colors.RESET}")
    print(f"  Net income:  {format_currency(t.total_net)} (cash on cash {t.overall_cash_on_cash:.1f}%)")
    print(f"  Put ROI {t.put_roi:.2f}%  Long ROI {t.long_roi:.2f}%  Optionable {format_currency(t.total_optionable)}")


def report_monthly(session, as_json: bool) -> None:
    report = build_monthly_report(
        OptionOperations.get_all(session),
        LongPositionOperations.get_all(session),
        DividendOperations.get_all(session),
    )
    if as_json:
        print(json.dumps({
            "puts_by_month": report.puts_by_month,
            "calls_by_month": report.calls_by_month,
            "capgains_by_month": report.capgains_by_month,
            "dividends_by_month": report.dividends_by_month,
            "table": [{"symbol": r.symbol, "months": r.months, "total": r.total} for r in report.table],
            "column_totals": report.column_totals,
            "grand_total": report.grand_total,
            "stacked_premiums": report.stacked_premiums(),
            "year_months": report.year_months,
        }, indent=2))
        return

    print_header("Monthly Income")
    if report.year_months:
        print(f"  Data from {report.year_months[0]} to {report.year_months[-1]} (months fold across years)\n")
    print("  " + f"{'Symbol':6}" + "".join(f"{m:>8}" for m in MONTH_NAMES) + f"{'Total':>10}")
    for row in report.table:
        print("  " + f"{row.symbol:6}" + "".join(f"{v:>8,.0f}" for v in row.months) + f"{row.total:>10,.0f}")
    print("  " + f"{'Total':6}" + "".join(f"{v:>8,.0f}" for v in report.column_totals) + f"{report.grand_total:>10,.0f}")


def report_options(session, as_json: bool) -> None:
    options = OptionOperations.get_open(session)
    expirations = open_option_details(options, date.today())
    by_symbol = summarize_open_options(options)

    if as_json:
        print(json.dumps({
            "options": [
                {
                    "id": d.option.id,
                    "symbol": d.option.symbol,
                    "type": d.option.type,
                    "strike": d.option.strike,
                    "expiration": d.option.expiration.isoformat(),
                    "days_to_expiration": d.days_to_expiration,
                    "status": d.status,
                }
                for d in expirations.details
            ],
            "by_symbol": [asdict(row) for row in by_symbol],
        }, indent=2))
        return

    print_header("Open Options")
    for d in expirations.details:
        color = STATUS_COLORS.get(d.status, "")
        o = d.option
        print(
            f"  {o.symbol:6} {o.type:4} {o.strike:>8.2f} x{o.contracts:<3} exp {o.expiration}"
            f"  {color}{d.days_to_expiration:>4}d {d.status}{Colors.RESET}"
        )
    print()
    for row in by_symbol:
        print(f"  {row.symbol:6} puts {row.put_count:>3} ({row.put_premium:.2f})  calls {row.call_count:>3} ({row.call_premium:.2f})")


def report_treasuries(session, as_json: bool) -> None:
    summary = summarize_treasuries(TreasuryOperations.get_all(session))
    if as_json:
        print(json.dumps(dict(asdict(summary), average_return=summary.average_return), indent=2))
        return

    print_header("Treasuries")
    print(f"  Face amount:    {format_currency(summary.total_amount)}")
    print(f"  Paid:           {format_currency(summary.total_buy_price)}")
    print(f"  Profit/loss:    {format_currency(summary.total_profit_loss)}")
    print(f"  Interest:       {format_currency(summary.total_interest)} ({summary.average_return:.2f}%)")
    print(f"  Active bonds:   {summary.active_positions}")


def report_metrics(session, as_json: bool) -> None:
    series = MetricOperations.chart_data(session, latest_per_day=True)
    if as_json:
        print(json.dumps({kind: [p.to_dict() for p in points] for kind, points in series.items()}, indent=2))
        return

    print_header("Metrics (latest per day)")
    for kind, points in series.items():
        last = f"{points[-1].day} = {points[-1].value:,.2f}" if points else "no data"
        print(f"  {kind:16} {len(points):>4} day(s), last {last}")


REPORTS = {
    "dashboard": report_dashboard,
    "monthly": report_monthly,
    "options": report_options,
    "treasuries": report_treasuries,
    "metrics": report_metrics,
}


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Print portfolio reports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("report", choices=sorted(REPORTS), help="Report to print")
    parser.add_argument("--db", type=str, help="Database name (default: active database)")
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    return parser.parse_args()


def main() -> int:
    """Main entry point."""
    args = parse_args()
    setup_logging(args.verbose)

    try:
        engine = get_engine(database_path(args.db))
        with get_session_context(engine) as session:
            REPORTS[args.report](session, args.json)
        return 0
    except WheelerError as e:
        print_error(f"{e.kind}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

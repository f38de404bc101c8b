#!/usr/bin/env python3
"""CLI script for backfilling daily portfolio metrics.

Usage:
    # Snapshot today only (DEFAULT_SNAPSHOT_DAYS)
    python scripts/run_snapshot.py

    # Backfill the last 90 days
    python scripts/run_snapshot.py --days 90

    # Preview the computed values without writing metrics
    python scripts/run_snapshot.py --days 7 --dry-run

    # Run against a specific portfolio database
    python scripts/run_snapshot.py --db demo.db --days 30

    # JSON output, verbose logging
    python scripts/run_snapshot.py --days 30 --json --verbose
"""

import argparse
import json
import logging
import signal
import sys
import threading
from datetime import datetime

# Add project root to path
sys.path.insert(0, str(__file__).rsplit("/", 2)[0])

from wheeler.core.config import settings
from wheeler.core.dates import parse_date
from wheeler.core.exceptions import OperationCancelled, WheelerError
from wheeler.db import database_path, get_engine, get_session_context
from wheeler.analytics import ComprehensiveSnapshot, SnapshotConfig, SnapshotResult


# ANSI color codes
class Colors:
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    BOLD = "\033[1m"
    RESET = "\033[0m"


def print_header(text: str) -> None:
    """Print a formatted section header."""
    print(f"\n{Colors.BOLD}{Colors.BLUE}{'=' * 60}{Colors.RESET}")
    print(f"{Colors.BOLD}{Colors.BLUE}{text}{Colors.RESET}")
    print(f"{Colors.BOLD}{Colors.BLUE}{'=' * 60}{Colors.RESET}\n")


def print_success(text: str) -> None:
    print(f"{Colors.GREEN}✓ {text}{Colors.RESET}")


def print_warning(text: str) -> None:
    print(f"{Colors.YELLOW}⚠ {text}{Colors.RESET}")


def print_error(text: str) -> None:
    print(f"{Colors.RED}✗ {text}{Colors.RESET}")


def print_info(text: str) -> None:
    print(f"{Colors.CYAN}ℹ {text}{Colors.RESET}")


def print_states(result: SnapshotResult) -> None:
    """Print one line per day with the eight aggregates."""
    print(
        f"  {'Date':10}  {'Treasury':>10}  {'Long':>10}  {'#L':>3}  {'PutExp':>10}"
        f"  {'PutPrem':>8}  {'#P':>3}  {'CallPrem':>8}  {'#C':>3}"
    )
    for s in result.states:
        print(
            f"  {s.day.isoformat():10}  {s.treasury_value:>10,.0f}  {s.long_value:>10,.0f}  {s.long_count:>3}"
            f"  {s.put_exposure:>10,.0f}  {s.open_put_premium:>8,.0f}  {s.open_put_count:>3}"
            f"  {s.open_call_premium:>8,.0f}  {s.open_call_count:>3}"
        )


def setup_logging(verbose: bool) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # SQL echo is controlled by DEBUG, not --verbose
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Backfill daily portfolio metrics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--days",
        type=int,
        default=settings.DEFAULT_SNAPSHOT_DAYS,
        help=f"Days in the window ending today (default: {settings.DEFAULT_SNAPSHOT_DAYS})",
    )
    parser.add_argument(
        "--today",
        type=str,
        help="Last day of the window as YYYY-MM-DD (default: current date)",
    )
    parser.add_argument(
        "--db",
        type=str,
        help="Portfolio database name in DATA_DIR (default: active database)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute and print daily values without writing metrics",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output results as JSON",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args()


def main() -> int:
    """Main entry point."""
    args = parse_args()
    setup_logging(args.verbose)

    if args.days < 1:
        print_error("--days must be at least 1")
        return 1

    # Ctrl-C stops the run before the next metric write
    cancel_event = threading.Event()
    signal.signal(signal.SIGINT, lambda signum, frame: cancel_event.set())

    try:
        today = parse_date(args.today, field="today") if args.today else None
        engine = get_engine(database_path(args.db))

        if not args.json:
            print_header("Portfolio Snapshot")
            print_info(f"Started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
            print_info(f"Database: {database_path(args.db)}")

        config = SnapshotConfig(days=args.days, write_metrics=not args.dry_run)
        with get_session_context(engine) as session:
            result = ComprehensiveSnapshot(session, config=config, cancel_event=cancel_event).run(today=today)

        if args.json:
            output = result.to_dict()
            output["states"] = [s.to_dict() for s in result.states]
            print(json.dumps(output, indent=2))
            return 0

        print_states(result)
        if args.dry_run:
            print_warning("Dry run: no metrics written")
        else:
            print_success(f"Wrote {result.rows_written} metric rows in {result.duration_seconds:.2f}s")
        return 0

    except OperationCancelled as e:
        print_warning(f"Cancelled: {e}")
        return 130
    except WheelerError as e:
        print_error(f"{e.kind}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

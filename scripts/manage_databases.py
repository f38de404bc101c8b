#!/usr/bin/env python3
"""CLI script for managing portfolio databases in DATA_DIR.

Usage:
    # List portfolio databases (active one marked)
    python scripts/manage_databases.py list

    # Show the active database
    python scripts/manage_databases.py current

    # Switch the active database ('.db' is appended when missing)
    python scripts/manage_databases.py use demo

    # Create (and migrate) a new database without switching to it
    python scripts/manage_databases.py create demo

    # Show applied migrations
    python scripts/manage_databases.py migrations
"""

import argparse
import logging
import sys

# Add project root to path
sys.path.insert(0, str(__file__).rsplit("/", 2)[0])

from wheeler.core.config import settings
from wheeler.core.exceptions import WheelerError
from wheeler.db import (
    applied_versions,
    database_path,
    get_current_database,
    get_engine,
    list_databases,
    set_current_database,
    verify_migrations,
)


# ANSI color codes
class Colors:
    GREEN = "\033[92m"
    RED = "\033[91m"
    CYAN = "\033[96m"
    BOLD = "\033[1m"
    RESET = "\033[0m"


def print_success(text: str) -> None:
    print(f"{Colors.GREEN}✓ {text}{Colors.RESET}")


def print_error(text: str) -> None:
    print(f"{Colors.RED}✗ {text}{Colors.RESET}")


def print_info(text: str) -> None:
    print(f"{Colors.CYAN}ℹ {text}{Colors.RESET}")


def setup_logging(verbose: bool) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Manage portfolio databases",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("list", help="List databases in DATA_DIR")
    commands.add_parser("current", help="Show the active database")

    use = commands.add_parser("use", help="Switch the active database")
    use.add_argument("name", help="Database name")

    create = commands.add_parser("create", help="Create and migrate a database")
    create.add_argument("name", help="Database name")

    migrations = commands.add_parser("migrations", help="Show applied migrations")
    migrations.add_argument("--db", help="Database name (default: active database)")

    return parser.parse_args()


def main() -> int:
    """Main entry point."""
    args = parse_args()
    setup_logging(args.verbose)

    try:
        if args.command == "list":
            current = get_current_database()
            names = list_databases()
            if not names:
                print_info(f"No databases in {settings.DATA_DIR}")
            for name in names:
                marker = f"{Colors.BOLD}*{Colors.RESET}" if name == current else " "
                print(f" {marker} {name}")

        elif args.command == "current":
            print(get_current_database())

        elif args.command == "use":
            name = set_current_database(args.name)
            get_engine()
            print_success(f"Active database: {name}")

        elif args.command == "create":
            path = database_path(args.name)
            existed = path.exists()
            get_engine(path)
            if existed:
                print_info(f"{path.name} already exists; migrations up to date")
            else:
                print_success(f"Created {path.name}")

        elif args.command == "migrations":
            engine = get_engine(database_path(args.db))
            verify_migrations(engine)
            for version in applied_versions(engine):
                print(f"  {version}")

        return 0

    except WheelerError as e:
        print_error(f"{e.kind}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

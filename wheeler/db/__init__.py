"""
Database connection and session management.

Exports:
    - create_sqlite_engine: Engine with foreign keys, WAL and busy timeout pragmas
    - get_engine: Cached engine for the active (or a given) portfolio database
    - get_session_context: Context manager without auto-commit (explicit control)
    - get_db_session: Context manager with auto-commit (for workflows/jobs)
    - get_current_database / set_current_database / list_databases: Active portfolio pointer
    - apply_migrations / verify_migrations / applied_versions: Schema migrations
"""

from .migrations import (
    BASELINE_VERSION,
    MIGRATIONS,
    apply_migrations,
    applied_versions,
    verify_migrations,
)
from .engine import (
    create_sqlite_engine,
    make_session_factory,
    get_engine,
    dispose_engine,
    dispose_all_engines,
    get_session_context,
    get_db_session,
    get_current_database,
    set_current_database,
    list_databases,
    database_path,
    normalize_database_name,
)

__all__ = [
    "BASELINE_VERSION",
    "MIGRATIONS",
    "apply_migrations",
    "applied_versions",
    "verify_migrations",
    "create_sqlite_engine",
    "make_session_factory",
    "get_engine",
    "dispose_engine",
    "dispose_all_engines",
    "get_session_context",
    "get_db_session",
    "get_current_database",
    "set_current_database",
    "list_databases",
    "database_path",
    "normalize_database_name",
]

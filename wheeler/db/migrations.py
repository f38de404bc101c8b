"""
One-shot schema migrations recorded in schema_migrations.

Each migration is a (version, function) pair applied at most once, inside its
own transaction, in registration order. Re-running apply_migrations on a
migrated database is a no-op.
"""

import logging
from typing import Callable, List, Tuple

from sqlalchemy import inspect, insert, select
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel

from wheeler.core.exceptions import BackendError
from wheeler.models import (
    Dividend,
    LongPosition,
    Metric,
    Option,
    SchemaMigration,
    Setting,
    Symbol,
    Treasury,
)
from wheeler.models.mixins import utcnow

logger = logging.getLogger(__name__)

BASELINE_VERSION = "20250111000001_baseline_v1_schema"


def _baseline_v1_schema(connection: Connection) -> None:
    """Create the seven portfolio tables with their constraints and indexes."""
    tables = [
        Symbol.__table__,
        LongPosition.__table__,
        Option.__table__,
        Dividend.__table__,
        Treasury.__table__,
        Setting.__table__,
        Metric.__table__,
    ]
    SQLModel.metadata.create_all(connection, tables=tables, checkfirst=True)


MIGRATIONS: List[Tuple[str, Callable[[Connection], None]]] = [
    (BASELINE_VERSION, _baseline_v1_schema),
]


def applied_versions(engine: Engine) -> List[str]:
    """Return recorded migration versions in ascending order (empty if untracked)."""
    if not inspect(engine).has_table(SchemaMigration.__tablename__):
        return []

    table = SchemaMigration.__table__
    with engine.connect() as connection:
        rows = connection.execute(select(table.c.version).order_by(table.c.version))
        return [row[0] for row in rows]


def apply_migrations(engine: Engine) -> List[str]:
    """
    Apply every registered migration not yet recorded.

    Args:
        engine: Engine of the database to migrate

    Returns:
        Versions applied by this call (empty when already up to date)

    Raises:
        BackendError: If a migration fails; that migration's transaction is rolled back
    """
    applied: List[str] = []
    try:
        SchemaMigration.__table__.create(engine, checkfirst=True)
        done = set(applied_versions(engine))

        for version, migrate in MIGRATIONS:
            if version in done:
                continue

            with engine.begin() as connection:
                migrate(connection)
                connection.execute(
                    insert(SchemaMigration.__table__).values(version=version, applied_at=utcnow())
                )
            applied.append(version)
            logger.info(f"Applied migration {version}")

    except SQLAlchemyError as e:
        logger.error(f"Migration failed: {e}")
        raise BackendError(f"Failed to apply migrations: {e}", entity="schema_migrations") from e

    if not applied:
        logger.debug("Database schema up to date")

    return applied


def verify_migrations(engine: Engine) -> None:
    """
    Verify that the baseline schema has been applied.

    Does NOT create tables.

    Raises:
        RuntimeError: If the baseline migration is not recorded
    """
    versions = applied_versions(engine)
    if BASELINE_VERSION not in versions:
        logger.error("❌ Baseline migration not applied")
        raise RuntimeError(
            "Database schema not initialized. "
            "Run apply_migrations() or open the database through get_engine()."
        )
    logger.info(f"✅ Database migrations verified (current: {versions[-1]})")

"""
Database connection and session management.

One SQLite file per portfolio lives under DATA_DIR. A small pointer file
(DATA_DIR/currentdb) names the active portfolio; engines are created lazily,
migrated on first open and cached per database path.

Core operations never consult the pointer: they receive a Session. Only the
session helpers at the bottom of this module resolve the active database.
"""

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Generator, List, Optional, Union

from sqlalchemy import event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from wheeler.core.config import settings
from wheeler.core.exceptions import ValidationError
from wheeler.db.migrations import apply_migrations

# Configure logger
logger = logging.getLogger(__name__)

DB_SUFFIX = ".db"

# Cached engines keyed by resolved database path; guarded by _lock together
# with the pointer file so a switch never races a lookup.
_engines: Dict[str, Engine] = {}
_lock = threading.RLock()


def _is_memory_url(url: str) -> bool:
    database = make_url(url).database
    return database in (None, "", ":memory:")


def create_sqlite_engine(url: str, migrate: bool = True) -> Engine:
    """
    Create a SQLite engine with the connection pragmas every session relies on.

    Every connection enables foreign keys. File databases additionally get WAL
    journaling and a busy timeout. In-memory URLs share one connection across
    threads so the schema survives between sessions.

    Args:
        url: SQLAlchemy SQLite URL (e.g. 'sqlite:///data/wheeler.db' or 'sqlite://')
        migrate: If True, apply pending migrations before returning

    Returns:
        Configured engine
    """
    in_memory = _is_memory_url(url)

    if in_memory:
        engine = create_engine(
            url,
            echo=settings.DEBUG,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(
            url,
            echo=settings.DEBUG,
            connect_args={"check_same_thread": False},
        )

    busy_timeout = settings.SQLITE_BUSY_TIMEOUT_MS

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragmas(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        if not in_memory:
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout)}")
        cursor.close()

    logger.info(f"Database engine configured: {'in-memory' if in_memory else make_url(url).database}")
    logger.debug(f"  - foreign_keys: ON, busy_timeout: {busy_timeout}ms, SQL echo: {settings.DEBUG}")

    if migrate:
        apply_migrations(engine)

    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    """
    Session factory bound to an engine.

    expire_on_commit=False keeps returned rows readable after commit;
    autoflush=False leaves flush timing to the caller.
    """
    return sessionmaker(
        bind=engine,
        class_=Session,
        expire_on_commit=False,
        autoflush=False,
    )


# =============================================================================
# Active database pointer
# =============================================================================

def data_dir() -> Path:
    """Return DATA_DIR, creating it when missing."""
    path = Path(settings.DATA_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _pointer_file() -> Path:
    return data_dir() / settings.CURRENT_DB_FILE


def normalize_database_name(name: str) -> str:
    """
    Normalize a portfolio database file name.

    Appends '.db' when absent. Rejects empty names and names containing a path
    separator, since every portfolio lives directly in DATA_DIR.

    Raises:
        ValidationError: If the name is empty or contains a path separator
    """
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Database name must not be empty", entity="database", field="name")
    if "/" in cleaned or "\\" in cleaned or cleaned in (".", ".."):
        raise ValidationError(
            f"Database name '{cleaned}' must be a plain file name",
            entity="database",
            field="name",
        )
    if not cleaned.endswith(DB_SUFFIX):
        cleaned += DB_SUFFIX
    return cleaned


def get_current_database() -> str:
    """
    Read the active database name from the pointer file.

    Creates the pointer with DEFAULT_DB_NAME when it is missing or empty.

    Returns:
        Database file name (e.g. 'wheeler.db')
    """
    with _lock:
        pointer = _pointer_file()
        name = ""
        if pointer.exists():
            name = pointer.read_text(encoding="utf-8").strip()

        if not name:
            name = normalize_database_name(settings.DEFAULT_DB_NAME)
            pointer.write_text(name, encoding="utf-8")
            logger.info(f"Initialized database pointer to {name}")

        return name


def set_current_database(name: str) -> str:
    """
    Switch the active portfolio.

    Rewrites the pointer file and disposes the engine of the previously active
    database so the next session opens the new file.

    Args:
        name: Database file name; '.db' is appended when absent

    Returns:
        Normalized database name now active
    """
    new_name = normalize_database_name(name)

    with _lock:
        old_name = get_current_database()
        _pointer_file().write_text(new_name, encoding="utf-8")

        if old_name != new_name:
            dispose_engine(database_path(old_name))
        logger.info(f"Switched active database: {old_name} -> {new_name}")

    return new_name


def list_databases() -> List[str]:
    """List portfolio database files in DATA_DIR, sorted by name."""
    return sorted(p.name for p in data_dir().glob(f"*{DB_SUFFIX}") if p.is_file())


def database_path(name: Optional[str] = None) -> Path:
    """Resolve a database name (default: the active one) to its file path."""
    if name is None:
        name = get_current_database()
    return data_dir() / normalize_database_name(name)


# =============================================================================
# Engine cache
# =============================================================================

def get_engine(path: Optional[Union[str, Path]] = None) -> Engine:
    """
    Get the cached engine for a database file, creating and migrating it on first use.

    Args:
        path: Database file path. Defaults to the active database.

    Returns:
        Engine bound to the database file

    Raises:
        BackendError: If the database cannot be opened or migrated
    """
    with _lock:
        resolved = Path(path) if path is not None else database_path()
        key = str(resolved.resolve())

        engine = _engines.get(key)
        if engine is not None:
            return engine

        resolved.parent.mkdir(parents=True, exist_ok=True)
        engine = create_sqlite_engine(f"sqlite:///{resolved}")
        _engines[key] = engine
        return engine


def dispose_engine(path: Union[str, Path]) -> bool:
    """Dispose and forget the cached engine for a path. Returns True if one was cached."""
    with _lock:
        engine = _engines.pop(str(Path(path).resolve()), None)
        if engine is None:
            return False
        engine.dispose()
        logger.debug(f"Disposed engine for {path}")
        return True


def dispose_all_engines() -> None:
    with _lock:
        for engine in _engines.values():
            engine.dispose()
        _engines.clear()


# =============================================================================
# Sessions
# =============================================================================

@contextmanager
def get_session_context(engine: Optional[Engine] = None) -> Generator[Session, None, None]:
    """
    Context manager for database sessions.

    Does NOT auto-commit - caller must explicitly commit.
    Use this for scripts, utilities, or when you need fine-grained control.

    Usage:
        from wheeler.db import get_session_context

        with get_session_context() as session:
            OptionOperations.create(session, "AAPL", "Put", ...)

    Args:
        engine: Engine to bind; defaults to the active database

    Yields:
        Session: Database session
    """
    session = make_session_factory(engine or get_engine())()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def get_db_session(engine: Optional[Engine] = None) -> Generator[Session, None, None]:
    """
    Context manager for database sessions with auto-commit.

    Auto-commits on success, auto-rolls back on exception.
    Use this for workflows such as the snapshot backfill.

    Args:
        engine: Engine to bind; defaults to the active database

    Yields:
        Session: Database session
    """
    session = make_session_factory(engine or get_engine())()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

"""Shared input validation and storage error translation for domain operations."""

import logging
import math
from contextlib import contextmanager
from typing import Any, Generator, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from wheeler.core.exceptions import (
    BackendError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


@contextmanager
def storage_errors(session: Session, entity: str, action: str) -> Generator[None, None, None]:
    """
    Translate SQLAlchemy failures raised inside the block into categorised errors.

    The session is rolled back before the error is raised. CHECK constraint
    failures become ValidationError, other integrity failures (unique and
    foreign keys) ConflictError, anything else BackendError.
    """
    try:
        yield
    except IntegrityError as e:
        session.rollback()
        detail = str(e.orig)
        if "CHECK constraint" in detail:
            logger.warning(f"Rejected {action} {entity}: {detail}")
            raise ValidationError(f"Invalid {entity}: {detail}", entity=entity) from e
        logger.warning(f"Conflict on {action} {entity}: {detail}")
        raise ConflictError(f"Cannot {action} {entity}: {detail}", entity=entity) from e
    except SQLAlchemyError as e:
        session.rollback()
        logger.warning(f"Storage failure on {action} {entity}: {e}")
        raise BackendError(f"Storage failure on {action} {entity}: {e}", entity=entity) from e


def save(session: Session, instance: Any, entity: str, action: str = "create", commit: bool = True) -> Any:
    """
    Add an instance and persist it.

    With commit=False the session is flushed so server-assigned ids are
    populated and constraint violations surface immediately; the caller commits.
    """
    with storage_errors(session, entity, action):
        session.add(instance)
        if commit:
            session.commit()
            session.refresh(instance)
        else:
            session.flush()
    return instance


def finish(session: Session, entity: str, action: str, commit: bool = True) -> None:
    """Commit (or flush) pending changes under error translation."""
    with storage_errors(session, entity, action):
        if commit:
            session.commit()
        else:
            session.flush()


def not_found(entity: str, key: Any, field: Optional[str] = None) -> NotFoundError:
    logger.warning(f"{entity} not found: {key}")
    return NotFoundError(f"{entity} {key} not found", entity=entity, field=field)


def normalize_symbol(symbol: Any, entity: str = "symbol") -> str:
    """Upper-case and strip a ticker; empty tickers are rejected."""
    if not isinstance(symbol, str) or not symbol.strip():
        raise ValidationError("Symbol must be a non-empty string", entity=entity, field="symbol")
    return symbol.strip().upper()


def _number(value: Any, field: str, entity: str) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number", entity=entity, field=field)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number, got {value!r}", entity=entity, field=field)
    if not math.isfinite(number):
        raise ValidationError(f"{field} must be finite", entity=entity, field=field)
    return number


def require_positive(value: Any, field: str, entity: str) -> float:
    number = _number(value, field, entity)
    if number <= 0:
        raise ValidationError(f"{field} must be positive, got {value}", entity=entity, field=field)
    return number


def require_non_negative(value: Any, field: str, entity: str) -> float:
    number = _number(value, field, entity)
    if number < 0:
        raise ValidationError(f"{field} must not be negative, got {value}", entity=entity, field=field)
    return number


def optional_non_negative(value: Any, field: str, entity: str) -> Optional[float]:
    if value is None:
        return None
    return require_non_negative(value, field, entity)


def require_positive_int(value: Any, field: str, entity: str) -> int:
    """Accept ints (and integral floats); reject bools, fractions and values < 1."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer", entity=entity, field=field)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer, got {value!r}", entity=entity, field=field)
    if value <= 0:
        raise ValidationError(f"{field} must be positive, got {value}", entity=entity, field=field)
    return value


def require_close_pair(closed: Any, exit_price: Any, entity: str) -> None:
    """Closed date and exit price are set together or not at all."""
    if (closed is None) != (exit_price is None):
        raise ValidationError(
            "closed and exit_price must both be set or both be empty",
            entity=entity,
            field="closed" if closed is None else "exit_price",
        )


def reject_duplicate(session: Session, model: Any, key: Any, entity: str, field: str) -> None:
    """Raise ConflictError when a row with this primary key already exists."""
    if session.get(model, key) is not None:
        logger.warning(f"Conflict on create {entity}: {key} already exists")
        raise ConflictError(f"{entity} {key} already exists", entity=entity, field=field)

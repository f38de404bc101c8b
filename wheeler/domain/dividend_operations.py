"""Domain operations for Dividend model - Shared CRUD operations."""

import logging
from typing import List, Optional

from sqlalchemy import delete, func
from sqlmodel import Session, select

from wheeler.core.dates import DateInput, coerce_date
from wheeler.models import DIVIDEND_AMOUNT_TOLERANCE, Dividend
from .guards import finish, normalize_symbol, not_found, require_positive, save, storage_errors
from .symbol_operations import SymbolOperations

logger = logging.getLogger(__name__)

ENTITY = "dividend"


class DividendOperations:
    """Core CRUD operations for Dividend model.

    Amounts are matched with an absolute tolerance of 0.001 when deleting.
    """

    @staticmethod
    def get_by_id(session: Session, dividend_id: int) -> Optional[Dividend]:
        return session.get(Dividend, dividend_id)

    @staticmethod
    def get_by_symbol(session: Session, symbol: str) -> List[Dividend]:
        """Get dividends for a ticker, most recent first."""
        stmt = (
            select(Dividend)
            .where(Dividend.symbol == normalize_symbol(symbol, ENTITY))
            .order_by(Dividend.received.desc(), Dividend.id)
        )
        return list(session.exec(stmt).all())

    @staticmethod
    def get_all(session: Session) -> List[Dividend]:
        """Get every dividend, most recent first."""
        stmt = select(Dividend).order_by(Dividend.received.desc(), Dividend.symbol, Dividend.id)
        return list(session.exec(stmt).all())

    @staticmethod
    def get_by_date_range(
        session: Session,
        start_date: DateInput,
        end_date: DateInput,
        symbol: Optional[str] = None,
    ) -> List[Dividend]:
        """Get dividends received in a date range.

        Args:
            session: Database session
            start_date: Start of range (inclusive)
            end_date: End of range (inclusive)
            symbol: Optional ticker filter

        Returns:
            Dividends in range, ordered by received date ascending
        """
        stmt = select(Dividend).where(
            Dividend.received >= coerce_date(start_date, "start_date", ENTITY),
            Dividend.received <= coerce_date(end_date, "end_date", ENTITY),
        )
        if symbol is not None:
            stmt = stmt.where(Dividend.symbol == normalize_symbol(symbol, ENTITY))
        stmt = stmt.order_by(Dividend.received, Dividend.id)
        return list(session.exec(stmt).all())

    @staticmethod
    def get_total_for_symbol(session: Session, symbol: str) -> float:
        """Sum of dividends received for a ticker (0 when none)."""
        stmt = select(func.coalesce(func.sum(Dividend.amount), 0.0)).where(
            Dividend.symbol == normalize_symbol(symbol, ENTITY)
        )
        return float(session.exec(stmt).one())

    @staticmethod
    def create(
        session: Session, symbol: str, received: DateInput, amount: float, commit: bool = True
    ) -> Dividend:
        """Record a dividend.

        Args:
            session: Database session
            symbol: Ticker; a Symbol row is created when missing
            received: Date received
            amount: Cash amount (positive)
            commit: If True, commit immediately. If False, caller must commit.

        Returns:
            Created dividend

        Raises:
            ValidationError: If amount is not positive or the date is malformed
            ConflictError: If (symbol, received, amount) already exists
        """
        ticker = normalize_symbol(symbol, ENTITY)
        row = Dividend(
            symbol=ticker,
            received=coerce_date(received, "received", ENTITY),
            amount=require_positive(amount, "amount", ENTITY),
        )
        with storage_errors(session, ENTITY, "create"):
            SymbolOperations.ensure(session, ticker)
        return save(session, row, ENTITY, commit=commit)

    @staticmethod
    def delete(
        session: Session, symbol: str, received: DateInput, amount: float, commit: bool = True
    ) -> int:
        """Delete the dividend at (symbol, received) whose amount is within 0.001.

        Returns:
            Number of rows deleted

        Raises:
            NotFoundError: If no stored amount is within tolerance
        """
        ticker = normalize_symbol(symbol, ENTITY)
        received_on = coerce_date(received, "received", ENTITY)
        amount = require_positive(amount, "amount", ENTITY)
        stmt = delete(Dividend).where(
            Dividend.symbol == ticker,
            Dividend.received == received_on,
            func.abs(Dividend.amount - amount) < DIVIDEND_AMOUNT_TOLERANCE,
        ).execution_options(synchronize_session=False)

        with storage_errors(session, ENTITY, "delete"):
            deleted = session.exec(stmt).rowcount
        if deleted == 0:
            raise not_found(ENTITY, f"{ticker} {received_on} {amount}")

        finish(session, ENTITY, "delete", commit)
        return deleted

    @staticmethod
    def delete_by_id(session: Session, dividend_id: int, commit: bool = True) -> None:
        """Delete a dividend by id.

        Raises:
            NotFoundError: If the dividend does not exist
        """
        row = session.get(Dividend, dividend_id)
        if row is None:
            raise not_found(ENTITY, dividend_id, "id")
        session.delete(row)
        finish(session, ENTITY, "delete", commit)

    @staticmethod
    def delete_by_symbol(session: Session, symbol: str, commit: bool = True) -> int:
        stmt = delete(Dividend).where(
            Dividend.symbol == normalize_symbol(symbol, ENTITY)
        ).execution_options(synchronize_session=False)

        with storage_errors(session, ENTITY, "delete"):
            deleted = session.exec(stmt).rowcount
        finish(session, ENTITY, "delete", commit)

        logger.info(f"Deleted {deleted} dividend(s) for {symbol}")
        return deleted

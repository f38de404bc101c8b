"""Domain operations for Symbol model - Shared CRUD operations."""

from typing import List, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from wheeler.core.currency import DEFAULT_CURRENCY, is_valid_currency
from wheeler.core.dates import DateInput, coerce_optional_date
from wheeler.core.exceptions import ConflictError, ValidationError
from wheeler.models import Dividend, LongPosition, Option, Symbol
from .guards import finish, normalize_symbol, not_found, optional_non_negative, reject_duplicate, save

ENTITY = "symbol"


def _validate_currency(currency: str) -> str:
    code = (currency or "").strip().upper()
    if not is_valid_currency(code):
        raise ValidationError(f"Unknown currency code '{currency}'", entity=ENTITY, field="currency")
    return code


class SymbolOperations:
    """Core CRUD operations for Symbol model.

    Keep this class focused on data access only - no business logic.
    """

    @staticmethod
    def get_by_symbol(session: Session, symbol: str) -> Optional[Symbol]:
        """Get symbol row by ticker (case-insensitive).

        Args:
            session: Database session
            symbol: Ticker (e.g., 'AAPL')

        Returns:
            Symbol if found, None otherwise
        """
        return session.get(Symbol, normalize_symbol(symbol))

    @staticmethod
    def get_all(session: Session) -> List[Symbol]:
        """Get all symbol rows ordered by ticker."""
        stmt = select(Symbol).order_by(Symbol.symbol)
        return list(session.exec(stmt).all())

    @staticmethod
    def get_distinct_symbols(session: Session) -> List[str]:
        """Get every ticker known to the portfolio.

        Union of symbol rows and tickers referenced by options, long positions
        and dividends.

        Returns:
            Sorted list of unique tickers
        """
        tickers = set(session.exec(select(Symbol.symbol)).all())
        for model in (Option, LongPosition, Dividend):
            tickers.update(session.exec(select(model.symbol).distinct()).all())
        return sorted(tickers)

    @staticmethod
    def create(
        session: Session,
        symbol: str,
        currency: str = DEFAULT_CURRENCY,
        price: Optional[float] = None,
        dividend: Optional[float] = None,
        ex_dividend_date: Optional[DateInput] = None,
        pe_ratio: Optional[float] = None,
        commit: bool = True,
    ) -> Symbol:
        """Create a new symbol.

        Args:
            session: Database session
            symbol: Ticker; stored upper-cased
            currency: Display currency code (default USD)
            price: Last-known price
            dividend: Dividend per share
            ex_dividend_date: Next ex-dividend date
            pe_ratio: Price/earnings ratio
            commit: If True, commit immediately. If False, caller must commit.

        Returns:
            Created symbol

        Raises:
            ValidationError: If the ticker or currency is invalid
            ConflictError: If the ticker already exists
        """
        ticker = normalize_symbol(symbol)
        reject_duplicate(session, Symbol, ticker, ENTITY, "symbol")
        row = Symbol(
            symbol=ticker,
            currency=_validate_currency(currency),
            price=optional_non_negative(price, "price", ENTITY),
            dividend=optional_non_negative(dividend, "dividend", ENTITY),
            ex_dividend_date=coerce_optional_date(ex_dividend_date, "ex_dividend_date", ENTITY),
            pe_ratio=pe_ratio,
        )
        return save(session, row, ENTITY, commit=commit)

    @staticmethod
    def ensure(session: Session, symbol: str) -> Symbol:
        """Get the symbol row, creating it (currency USD) when missing.

        Flushes but does not commit; used inside the caller's transaction
        before an instrument referencing the ticker is inserted.
        """
        ticker = normalize_symbol(symbol)
        row = session.get(Symbol, ticker)
        if row is None:
            row = save(session, Symbol(symbol=ticker, currency=DEFAULT_CURRENCY), ENTITY, commit=False)
        return row

    @staticmethod
    def update_market_data(
        session: Session,
        symbol: str,
        price: Optional[float] = None,
        dividend: Optional[float] = None,
        ex_dividend_date: Optional[DateInput] = None,
        pe_ratio: Optional[float] = None,
        commit: bool = True,
    ) -> Symbol:
        """Replace last-known market data for a symbol.

        Raises:
            NotFoundError: If the symbol does not exist
        """
        row = SymbolOperations.get_by_symbol(session, symbol)
        if row is None:
            raise not_found(ENTITY, symbol, "symbol")

        row.price = optional_non_negative(price, "price", ENTITY)
        row.dividend = optional_non_negative(dividend, "dividend", ENTITY)
        row.ex_dividend_date = coerce_optional_date(ex_dividend_date, "ex_dividend_date", ENTITY)
        row.pe_ratio = pe_ratio
        session.add(row)
        finish(session, ENTITY, "update", commit)
        return row

    @staticmethod
    def update_currency(session: Session, symbol: str, currency: str, commit: bool = True) -> Symbol:
        """Set the display currency of a symbol.

        Raises:
            ValidationError: If the currency code is not recognized
            NotFoundError: If the symbol does not exist
        """
        code = _validate_currency(currency)
        row = SymbolOperations.get_by_symbol(session, symbol)
        if row is None:
            raise not_found(ENTITY, symbol, "symbol")

        row.currency = code
        session.add(row)
        finish(session, ENTITY, "update", commit)
        return row

    @staticmethod
    def delete(session: Session, symbol: str, commit: bool = True) -> None:
        """Delete a symbol that no instrument references.

        Raises:
            NotFoundError: If the symbol does not exist
            ConflictError: If options, long positions or dividends reference it
        """
        row = SymbolOperations.get_by_symbol(session, symbol)
        if row is None:
            raise not_found(ENTITY, symbol, "symbol")

        for model in (Option, LongPosition, Dividend):
            references = session.exec(
                select(func.count()).select_from(model).where(model.symbol == row.symbol)
            ).one()
            if references:
                raise ConflictError(
                    f"Symbol {row.symbol} is referenced by {references} {model.__tablename__} row(s)",
                    entity=ENTITY,
                    field="symbol",
                )

        session.delete(row)
        finish(session, ENTITY, "delete", commit)

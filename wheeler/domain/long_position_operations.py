"""Domain operations for LongPosition model - Shared CRUD operations."""

import logging
from typing import List, Optional

from sqlalchemy import delete, update
from sqlmodel import Session, select

from wheeler.core.dates import DateInput, coerce_date, coerce_optional_date
from wheeler.core.exceptions import ValidationError
from wheeler.models import LongPosition
from wheeler.models.mixins import utcnow
from .guards import (
    finish,
    normalize_symbol,
    not_found,
    optional_non_negative,
    require_close_pair,
    require_positive,
    require_positive_int,
    save,
    storage_errors,
)
from .symbol_operations import SymbolOperations

logger = logging.getLogger(__name__)

ENTITY = "long position"


def _validated_fields(
    symbol: str,
    opened: DateInput,
    shares: int,
    buy_price: float,
    closed: Optional[DateInput] = None,
    exit_price: Optional[float] = None,
) -> dict:
    fields = {
        "symbol": normalize_symbol(symbol, ENTITY),
        "opened": coerce_date(opened, "opened", ENTITY),
        "closed": coerce_optional_date(closed, "closed", ENTITY),
        "shares": require_positive_int(shares, "shares", ENTITY),
        "buy_price": require_positive(buy_price, "buy_price", ENTITY),
        "exit_price": optional_non_negative(exit_price, "exit_price", ENTITY),
    }
    require_close_pair(fields["closed"], fields["exit_price"], ENTITY)
    if fields["closed"] is not None and fields["closed"] < fields["opened"]:
        raise ValidationError("closed must not be before opened", entity=ENTITY, field="closed")
    return fields


class LongPositionOperations:
    """Core CRUD operations for LongPosition model."""

    @staticmethod
    def get_by_id(session: Session, position_id: int) -> Optional[LongPosition]:
        """Get long position by id.

        Returns:
            LongPosition if found, None otherwise
        """
        return session.get(LongPosition, position_id)

    @staticmethod
    def get_by_symbol(session: Session, symbol: str) -> List[LongPosition]:
        stmt = (
            select(LongPosition)
            .where(LongPosition.symbol == normalize_symbol(symbol, ENTITY))
            .order_by(LongPosition.opened, LongPosition.id)
        )
        return list(session.exec(stmt).all())

    @staticmethod
    def get_all(session: Session) -> List[LongPosition]:
        return list(session.exec(select(LongPosition).order_by(LongPosition.id)).all())

    @staticmethod
    def get_open_positions(session: Session) -> List[LongPosition]:
        """Get positions without a closed date, ordered by ticker then opened date."""
        stmt = (
            select(LongPosition)
            .where(LongPosition.closed.is_(None))
            .order_by(LongPosition.symbol, LongPosition.opened, LongPosition.id)
        )
        return list(session.exec(stmt).all())

    @staticmethod
    def create(
        session: Session,
        symbol: str,
        opened: DateInput,
        shares: int,
        buy_price: float,
        closed: Optional[DateInput] = None,
        exit_price: Optional[float] = None,
        commit: bool = True,
    ) -> LongPosition:
        """Record a stock purchase.

        An unknown ticker gets a Symbol row (currency USD) in the same transaction.

        Args:
            session: Database session
            symbol: Ticker
            opened: Purchase date
            shares: Share count (positive)
            buy_price: Price per share (positive)
            closed: Optional close date; requires exit_price
            exit_price: Optional exit price per share; requires closed
            commit: If True, commit immediately. If False, caller must commit.

        Returns:
            Created position with populated id

        Raises:
            ValidationError: If any field is invalid
        """
        fields = _validated_fields(symbol, opened, shares, buy_price, closed, exit_price)
        with storage_errors(session, ENTITY, "create"):
            SymbolOperations.ensure(session, fields["symbol"])
        return save(session, LongPosition(**fields), ENTITY, commit=commit)

    @staticmethod
    def update_by_id(
        session: Session,
        position_id: int,
        symbol: str,
        opened: DateInput,
        shares: int,
        buy_price: float,
        closed: Optional[DateInput] = None,
        exit_price: Optional[float] = None,
        commit: bool = True,
    ) -> LongPosition:
        """Replace every field of a long position.

        Raises:
            NotFoundError: If the position does not exist
            ValidationError: If any field is invalid
        """
        fields = _validated_fields(symbol, opened, shares, buy_price, closed, exit_price)
        position = session.get(LongPosition, position_id)
        if position is None:
            raise not_found(ENTITY, position_id, "id")

        with storage_errors(session, ENTITY, "update"):
            SymbolOperations.ensure(session, fields["symbol"])

        for key, value in fields.items():
            setattr(position, key, value)
        session.add(position)
        finish(session, ENTITY, "update", commit)
        return position

    @staticmethod
    def close_by_id(
        session: Session,
        position_id: int,
        closed: DateInput,
        exit_price: float,
        commit: bool = True,
    ) -> LongPosition:
        """Close an open position.

        Sets closed and exit price in a single UPDATE guarded by
        closed IS NULL and closed >= opened.

        Raises:
            NotFoundError: If the position does not exist
            ValidationError: If already closed or closed is before opened
        """
        closed_on = coerce_date(closed, "closed", ENTITY)
        price = optional_non_negative(exit_price, "exit_price", ENTITY)
        if price is None:
            raise ValidationError("exit_price is required to close", entity=ENTITY, field="exit_price")

        stmt = (
            update(LongPosition)
            .where(
                LongPosition.id == position_id,
                LongPosition.closed.is_(None),
                LongPosition.opened <= closed_on,
            )
            .values(closed=closed_on, exit_price=price, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )

        with storage_errors(session, ENTITY, "close"):
            matched = session.exec(stmt).rowcount

        if matched == 0:
            position = session.get(LongPosition, position_id, populate_existing=True)
            if position is None:
                raise not_found(ENTITY, position_id, "id")
            if position.closed is not None:
                raise ValidationError(
                    f"Long position {position_id} is already closed on {position.closed}",
                    entity=ENTITY,
                    field="closed",
                )
            raise ValidationError(
                f"Close date {closed_on} is before opened {position.opened}",
                entity=ENTITY,
                field="closed",
            )

        finish(session, ENTITY, "close", commit)
        return session.get(LongPosition, position_id, populate_existing=True)

    @staticmethod
    def find_open(
        session: Session, symbol: str, opened: DateInput, shares: int, buy_price: float
    ) -> Optional[LongPosition]:
        """Find the oldest open position matching a business key."""
        stmt = (
            select(LongPosition)
            .where(
                LongPosition.symbol == normalize_symbol(symbol, ENTITY),
                LongPosition.opened == coerce_date(opened, "opened", ENTITY),
                LongPosition.shares == shares,
                LongPosition.buy_price == buy_price,
                LongPosition.closed.is_(None),
            )
            .order_by(LongPosition.id)
        )
        return session.exec(stmt).first()

    @staticmethod
    def close(
        session: Session,
        symbol: str,
        opened: DateInput,
        shares: int,
        buy_price: float,
        closed: DateInput,
        exit_price: float,
        commit: bool = True,
    ) -> LongPosition:
        """Close the open position identified by (symbol, opened, shares, buy_price).

        Raises:
            NotFoundError: If no open position matches
        """
        position = LongPositionOperations.find_open(session, symbol, opened, shares, buy_price)
        if position is None:
            raise not_found(ENTITY, f"{symbol} {shares}@{buy_price} opened {opened}")
        return LongPositionOperations.close_by_id(session, position.id, closed, exit_price, commit=commit)

    @staticmethod
    def delete_by_id(session: Session, position_id: int, commit: bool = True) -> None:
        """Delete a long position by id.

        Raises:
            NotFoundError: If the position does not exist
        """
        position = session.get(LongPosition, position_id)
        if position is None:
            raise not_found(ENTITY, position_id, "id")

        session.delete(position)
        finish(session, ENTITY, "delete", commit)

    @staticmethod
    def delete(
        session: Session,
        symbol: str,
        opened: DateInput,
        shares: int,
        buy_price: float,
        commit: bool = True,
    ) -> int:
        """Delete every position matching a business key.

        Raises:
            NotFoundError: If nothing matches
        """
        stmt = delete(LongPosition).where(
            LongPosition.symbol == normalize_symbol(symbol, ENTITY),
            LongPosition.opened == coerce_date(opened, "opened", ENTITY),
            LongPosition.shares == shares,
            LongPosition.buy_price == buy_price,
        ).execution_options(synchronize_session=False)

        with storage_errors(session, ENTITY, "delete"):
            deleted = session.exec(stmt).rowcount
        if deleted == 0:
            raise not_found(ENTITY, f"{symbol} {shares}@{buy_price} opened {opened}")

        finish(session, ENTITY, "delete", commit)
        return deleted

    @staticmethod
    def delete_by_symbol(session: Session, symbol: str, commit: bool = True) -> int:
        """Delete all positions for a ticker. Returns the number of rows deleted."""
        stmt = delete(LongPosition).where(
            LongPosition.symbol == normalize_symbol(symbol, ENTITY)
        ).execution_options(synchronize_session=False)

        with storage_errors(session, ENTITY, "delete"):
            deleted = session.exec(stmt).rowcount
        finish(session, ENTITY, "delete", commit)

        logger.info(f"Deleted {deleted} long position(s) for {symbol}")
        return deleted

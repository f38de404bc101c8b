"""Domain operations for Option model - Shared CRUD operations."""

import logging
from typing import List, Optional

from sqlalchemy import delete, update
from sqlmodel import Session, select

from wheeler.core.dates import DateInput, coerce_date, coerce_optional_date
from wheeler.core.exceptions import ValidationError
from wheeler.models import OPTION_COMMISSION_PER_CONTRACT, OPTION_TYPES, Option
from wheeler.models.mixins import utcnow
from .guards import (
    finish,
    normalize_symbol,
    not_found,
    optional_non_negative,
    require_close_pair,
    require_non_negative,
    require_positive,
    require_positive_int,
    save,
    storage_errors,
)
from .symbol_operations import SymbolOperations

logger = logging.getLogger(__name__)

ENTITY = "option"


def opening_commission(contracts: int) -> float:
    """Commission charged when contracts are opened (and again when closed)."""
    return OPTION_COMMISSION_PER_CONTRACT * contracts


def normalize_option_type(option_type: str) -> str:
    """Accept 'put'/'PUT'/'Put' style input; anything but Put or Call is rejected."""
    if isinstance(option_type, str):
        candidate = option_type.strip().capitalize()
        if candidate in OPTION_TYPES:
            return candidate
    raise ValidationError(
        f"Option type must be one of {', '.join(OPTION_TYPES)}, got {option_type!r}",
        entity=ENTITY,
        field="type",
    )


def _validated_fields(
    symbol: str,
    option_type: str,
    opened: DateInput,
    strike: float,
    expiration: DateInput,
    premium: float,
    contracts: int,
    closed: Optional[DateInput] = None,
    exit_price: Optional[float] = None,
) -> dict:
    fields = {
        "symbol": normalize_symbol(symbol, ENTITY),
        "type": normalize_option_type(option_type),
        "opened": coerce_date(opened, "opened", ENTITY),
        "closed": coerce_optional_date(closed, "closed", ENTITY),
        "strike": require_positive(strike, "strike", ENTITY),
        "expiration": coerce_date(expiration, "expiration", ENTITY),
        "premium": require_non_negative(premium, "premium", ENTITY),
        "contracts": require_positive_int(contracts, "contracts", ENTITY),
        "exit_price": optional_non_negative(exit_price, "exit_price", ENTITY),
    }

    if fields["expiration"] < fields["opened"]:
        raise ValidationError("expiration must not be before opened", entity=ENTITY, field="expiration")

    require_close_pair(fields["closed"], fields["exit_price"], ENTITY)
    if fields["closed"] is not None and not fields["opened"] <= fields["closed"] <= fields["expiration"]:
        raise ValidationError(
            "closed must fall between opened and expiration", entity=ENTITY, field="closed"
        )
    return fields


class OptionOperations:
    """Core CRUD operations for Option model.

    Opening charges 0.65 per contract; closing increments the same amount, so a
    round trip costs 2 x 0.65 x contracts.
    """

    @staticmethod
    def get_by_id(session: Session, option_id: int) -> Optional[Option]:
        """Get option by id.

        Args:
            session: Database session
            option_id: Option id

        Returns:
            Option if found, None otherwise
        """
        return session.get(Option, option_id)

    @staticmethod
    def get_by_symbol(session: Session, symbol: str) -> List[Option]:
        """Get all options for a ticker, ordered by opened date then id."""
        stmt = (
            select(Option)
            .where(Option.symbol == normalize_symbol(symbol, ENTITY))
            .order_by(Option.opened, Option.id)
        )
        return list(session.exec(stmt).all())

    @staticmethod
    def get_all(session: Session) -> List[Option]:
        """Get every option ordered by id."""
        return list(session.exec(select(Option).order_by(Option.id)).all())

    @staticmethod
    def get_open(session: Session) -> List[Option]:
        """Get options without a closed date, soonest expiration first."""
        stmt = (
            select(Option)
            .where(Option.closed.is_(None))
            .order_by(Option.expiration, Option.symbol, Option.id)
        )
        return list(session.exec(stmt).all())

    @staticmethod
    def create(
        session: Session,
        symbol: str,
        option_type: str,
        opened: DateInput,
        strike: float,
        expiration: DateInput,
        premium: float,
        contracts: int,
        commit: bool = True,
    ) -> Option:
        """Open a new option position.

        Commission is set to 0.65 x contracts. An unknown ticker gets a Symbol
        row (currency USD) in the same transaction.

        Args:
            session: Database session
            symbol: Underlying ticker
            option_type: 'Put' or 'Call'
            opened: Date sold
            strike: Strike price (positive)
            expiration: Expiration date (not before opened)
            premium: Premium per share (non-negative)
            contracts: Number of contracts (positive)
            commit: If True, commit immediately. If False, caller must commit.

        Returns:
            Created option with populated id

        Raises:
            ValidationError: If any field is invalid
        """
        fields = _validated_fields(symbol, option_type, opened, strike, expiration, premium, contracts)
        return OptionOperations._insert(
            session, fields, opening_commission(fields["contracts"]), commit
        )

    @staticmethod
    def create_with_commission(
        session: Session,
        symbol: str,
        option_type: str,
        opened: DateInput,
        strike: float,
        expiration: DateInput,
        premium: float,
        contracts: int,
        commission: float,
        closed: Optional[DateInput] = None,
        exit_price: Optional[float] = None,
        commit: bool = True,
    ) -> Option:
        """Create an option with an explicit commission and optional close.

        Used when recording historical trades whose commission is already known.

        Raises:
            ValidationError: If any field is invalid or the close pair is incomplete
        """
        fields = _validated_fields(
            symbol, option_type, opened, strike, expiration, premium, contracts, closed, exit_price
        )
        return OptionOperations._insert(
            session, fields, require_non_negative(commission, "commission", ENTITY), commit
        )

    @staticmethod
    def _insert(session: Session, fields: dict, commission: float, commit: bool) -> Option:
        with storage_errors(session, ENTITY, "create"):
            SymbolOperations.ensure(session, fields["symbol"])
        return save(session, Option(commission=commission, **fields), ENTITY, commit=commit)

    @staticmethod
    def update_by_id(
        session: Session,
        option_id: int,
        symbol: str,
        option_type: str,
        opened: DateInput,
        strike: float,
        expiration: DateInput,
        premium: float,
        contracts: int,
        closed: Optional[DateInput] = None,
        exit_price: Optional[float] = None,
        commission: Optional[float] = None,
        commit: bool = True,
    ) -> Option:
        """Replace every field of an option.

        Commission is kept unless given explicitly.

        Raises:
            NotFoundError: If the option does not exist
            ValidationError: If any field is invalid
        """
        fields = _validated_fields(
            symbol, option_type, opened, strike, expiration, premium, contracts, closed, exit_price
        )
        option = session.get(Option, option_id)
        if option is None:
            raise not_found(ENTITY, option_id, "id")

        with storage_errors(session, ENTITY, "update"):
            SymbolOperations.ensure(session, fields["symbol"])

        for key, value in fields.items():
            setattr(option, key, value)
        if commission is not None:
            option.commission = require_non_negative(commission, "commission", ENTITY)

        session.add(option)
        finish(session, ENTITY, "update", commit)
        return option

    @staticmethod
    def close_by_id(
        session: Session,
        option_id: int,
        closed: DateInput,
        exit_price: float,
        commit: bool = True,
    ) -> Option:
        """Close an open option.

        Sets closed and exit price together and increments commission by
        0.65 x contracts in a single UPDATE, guarded so that only an open
        option with opened <= closed <= expiration matches.

        Args:
            session: Database session
            option_id: Option id
            closed: Close date
            exit_price: Buy-back price per share (non-negative)
            commit: If True, commit immediately. If False, caller must commit.

        Returns:
            The closed option, refreshed from the database

        Raises:
            NotFoundError: If the option does not exist
            ValidationError: If already closed or the close date is out of range
        """
        closed_on = coerce_date(closed, "closed", ENTITY)
        price = require_non_negative(exit_price, "exit_price", ENTITY)

        stmt = (
            update(Option)
            .where(
                Option.id == option_id,
                Option.closed.is_(None),
                Option.opened <= closed_on,
                Option.expiration >= closed_on,
            )
            .values(
                closed=closed_on,
                exit_price=price,
                commission=Option.commission + OPTION_COMMISSION_PER_CONTRACT * Option.contracts,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )

        with storage_errors(session, ENTITY, "close"):
            matched = session.exec(stmt).rowcount

        if matched == 0:
            option = session.get(Option, option_id, populate_existing=True)
            if option is None:
                raise not_found(ENTITY, option_id, "id")
            if option.closed is not None:
                raise ValidationError(
                    f"Option {option_id} is already closed on {option.closed}",
                    entity=ENTITY,
                    field="closed",
                )
            raise ValidationError(
                f"Close date {closed_on} must fall between {option.opened} and {option.expiration}",
                entity=ENTITY,
                field="closed",
            )

        finish(session, ENTITY, "close", commit)
        return session.get(Option, option_id, populate_existing=True)

    @staticmethod
    def find_open(
        session: Session,
        symbol: str,
        option_type: str,
        opened: DateInput,
        strike: float,
        expiration: DateInput,
        premium: float,
        contracts: int,
    ) -> Optional[Option]:
        """Find the oldest open option matching a business key."""
        stmt = (
            select(Option)
            .where(
                Option.symbol == normalize_symbol(symbol, ENTITY),
                Option.type == normalize_option_type(option_type),
                Option.opened == coerce_date(opened, "opened", ENTITY),
                Option.strike == strike,
                Option.expiration == coerce_date(expiration, "expiration", ENTITY),
                Option.premium == premium,
                Option.contracts == contracts,
                Option.closed.is_(None),
            )
            .order_by(Option.id)
        )
        return session.exec(stmt).first()

    @staticmethod
    def close(
        session: Session,
        symbol: str,
        option_type: str,
        opened: DateInput,
        strike: float,
        expiration: DateInput,
        premium: float,
        contracts: int,
        closed: DateInput,
        exit_price: float,
        commit: bool = True,
    ) -> Option:
        """Close the open option identified by its business key.

        Raises:
            NotFoundError: If no open option matches
        """
        option = OptionOperations.find_open(
            session, symbol, option_type, opened, strike, expiration, premium, contracts
        )
        if option is None:
            raise not_found(ENTITY, f"{symbol} {option_type} {strike} exp {expiration}")
        return OptionOperations.close_by_id(session, option.id, closed, exit_price, commit=commit)

    @staticmethod
    def update_current_price(
        session: Session, option_id: int, current_price: Optional[float], commit: bool = True
    ) -> Option:
        """Record the informational current price of an option.

        Raises:
            NotFoundError: If the option does not exist
        """
        option = session.get(Option, option_id)
        if option is None:
            raise not_found(ENTITY, option_id, "id")

        option.current_price = optional_non_negative(current_price, "current_price", ENTITY)
        session.add(option)
        finish(session, ENTITY, "update", commit)
        return option

    @staticmethod
    def delete_by_id(session: Session, option_id: int, commit: bool = True) -> None:
        """Delete an option by id.

        Raises:
            NotFoundError: If the option does not exist
        """
        option = session.get(Option, option_id)
        if option is None:
            raise not_found(ENTITY, option_id, "id")

        session.delete(option)
        finish(session, ENTITY, "delete", commit)

    @staticmethod
    def delete(
        session: Session,
        symbol: str,
        option_type: str,
        opened: DateInput,
        strike: float,
        expiration: DateInput,
        premium: float,
        contracts: int,
        commit: bool = True,
    ) -> int:
        """Delete every option matching a business key.

        Returns:
            Number of rows deleted

        Raises:
            NotFoundError: If nothing matches
        """
        stmt = delete(Option).where(
            Option.symbol == normalize_symbol(symbol, ENTITY),
            Option.type == normalize_option_type(option_type),
            Option.opened == coerce_date(opened, "opened", ENTITY),
            Option.strike == strike,
            Option.expiration == coerce_date(expiration, "expiration", ENTITY),
            Option.premium == premium,
            Option.contracts == contracts,
        ).execution_options(synchronize_session=False)

        with storage_errors(session, ENTITY, "delete"):
            deleted = session.exec(stmt).rowcount

        if deleted == 0:
            raise not_found(ENTITY, f"{symbol} {option_type} {strike} exp {expiration}")

        finish(session, ENTITY, "delete", commit)
        return deleted

    @staticmethod
    def delete_by_symbol(session: Session, symbol: str, commit: bool = True) -> int:
        """Delete all options for a ticker. Returns the number of rows deleted."""
        stmt = delete(Option).where(
            Option.symbol == normalize_symbol(symbol, ENTITY)
        ).execution_options(synchronize_session=False)

        with storage_errors(session, ENTITY, "delete"):
            deleted = session.exec(stmt).rowcount
        finish(session, ENTITY, "delete", commit)

        logger.info(f"Deleted {deleted} option(s) for {symbol}")
        return deleted

    @staticmethod
    def index(session: Session):
        """Build an OptionsIndex over every stored option."""
        from wheeler.analytics.options_index import OptionsIndex

        return OptionsIndex.build(OptionOperations.get_all(session))

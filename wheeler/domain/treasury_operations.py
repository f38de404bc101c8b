"""Domain operations for Treasury model - Shared CRUD operations."""

from typing import List, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from wheeler.core.dates import DateInput, coerce_date
from wheeler.core.exceptions import ValidationError
from wheeler.models import Treasury
from .guards import finish, not_found, optional_non_negative, reject_duplicate, require_positive, save

ENTITY = "treasury"


def _normalize_cuspid(cuspid: str) -> str:
    if not isinstance(cuspid, str) or not cuspid.strip():
        raise ValidationError("CUSIP must be a non-empty string", entity=ENTITY, field="cuspid")
    return cuspid.strip().upper()


def _validated_fields(
    purchased: DateInput,
    maturity: DateInput,
    amount: float,
    yield_pct: float,
    buy_price: float,
    current_value: Optional[float],
    exit_price: Optional[float],
) -> dict:
    fields = {
        "purchased": coerce_date(purchased, "purchased", ENTITY),
        "maturity": coerce_date(maturity, "maturity", ENTITY),
        "amount": require_positive(amount, "amount", ENTITY),
        "yield_pct": require_positive(yield_pct, "yield", ENTITY),
        "buy_price": require_positive(buy_price, "buy_price", ENTITY),
        "current_value": optional_non_negative(current_value, "current_value", ENTITY),
        "exit_price": optional_non_negative(exit_price, "exit_price", ENTITY),
    }
    if fields["maturity"] < fields["purchased"]:
        raise ValidationError("maturity must not be before purchased", entity=ENTITY, field="maturity")
    return fields


class TreasuryOperations:
    """Core CRUD operations for Treasury model (keyed by CUSIP)."""

    @staticmethod
    def get_by_cuspid(session: Session, cuspid: str) -> Optional[Treasury]:
        """Get treasury by CUSIP.

        Returns:
            Treasury if found, None otherwise
        """
        return session.get(Treasury, _normalize_cuspid(cuspid))

    @staticmethod
    def get_all(session: Session) -> List[Treasury]:
        """Get every treasury, nearest maturity first."""
        stmt = select(Treasury).order_by(Treasury.maturity, Treasury.cuspid)
        return list(session.exec(stmt).all())

    @staticmethod
    def get_total_open_value(session: Session) -> float:
        """Sum of face amounts of unsold treasuries."""
        stmt = select(func.coalesce(func.sum(Treasury.amount), 0.0)).where(Treasury.exit_price.is_(None))
        return float(session.exec(stmt).one())

    @staticmethod
    def create(
        session: Session,
        cuspid: str,
        purchased: DateInput,
        maturity: DateInput,
        amount: float,
        yield_pct: float,
        buy_price: float,
        commit: bool = True,
    ) -> Treasury:
        """Record a treasury purchase.

        Args:
            session: Database session
            cuspid: CUSIP identifier (non-empty)
            purchased: Purchase date
            maturity: Maturity date (not before purchased)
            amount: Face amount (positive)
            yield_pct: Yield in percent (positive)
            buy_price: Total price paid (positive)
            commit: If True, commit immediately. If False, caller must commit.

        Raises:
            ValidationError: If any field is invalid
            ConflictError: If the CUSIP already exists
        """
        return TreasuryOperations.create_full(
            session, cuspid, purchased, maturity, amount, yield_pct, buy_price, commit=commit
        )

    @staticmethod
    def create_full(
        session: Session,
        cuspid: str,
        purchased: DateInput,
        maturity: DateInput,
        amount: float,
        yield_pct: float,
        buy_price: float,
        current_value: Optional[float] = None,
        exit_price: Optional[float] = None,
        commit: bool = True,
    ) -> Treasury:
        """Record a treasury with optional current value and exit price."""
        fields = _validated_fields(purchased, maturity, amount, yield_pct, buy_price, current_value, exit_price)
        key = _normalize_cuspid(cuspid)
        reject_duplicate(session, Treasury, key, ENTITY, "cuspid")
        row = Treasury(cuspid=key, **fields)
        return save(session, row, ENTITY, commit=commit)

    @staticmethod
    def update(
        session: Session,
        cuspid: str,
        current_value: Optional[float] = None,
        exit_price: Optional[float] = None,
        commit: bool = True,
    ) -> Treasury:
        """Set current value and exit price; a non-null exit price marks the bond sold.

        Raises:
            NotFoundError: If the CUSIP does not exist
        """
        row = TreasuryOperations.get_by_cuspid(session, cuspid)
        if row is None:
            raise not_found(ENTITY, cuspid, "cuspid")

        row.current_value = optional_non_negative(current_value, "current_value", ENTITY)
        row.exit_price = optional_non_negative(exit_price, "exit_price", ENTITY)
        session.add(row)
        finish(session, ENTITY, "update", commit)
        return row

    @staticmethod
    def update_full(
        session: Session,
        cuspid: str,
        purchased: DateInput,
        maturity: DateInput,
        amount: float,
        yield_pct: float,
        buy_price: float,
        current_value: Optional[float] = None,
        exit_price: Optional[float] = None,
        commit: bool = True,
    ) -> Treasury:
        """Replace every field of a treasury.

        Raises:
            NotFoundError: If the CUSIP does not exist
        """
        fields = _validated_fields(purchased, maturity, amount, yield_pct, buy_price, current_value, exit_price)
        row = TreasuryOperations.get_by_cuspid(session, cuspid)
        if row is None:
            raise not_found(ENTITY, cuspid, "cuspid")

        for key, value in fields.items():
            setattr(row, key, value)
        session.add(row)
        finish(session, ENTITY, "update", commit)
        return row

    @staticmethod
    def delete(session: Session, cuspid: str, commit: bool = True) -> None:
        """Delete a treasury.

        Raises:
            NotFoundError: If the CUSIP does not exist
        """
        row = TreasuryOperations.get_by_cuspid(session, cuspid)
        if row is None:
            raise not_found(ENTITY, cuspid, "cuspid")
        session.delete(row)
        finish(session, ENTITY, "delete", commit)

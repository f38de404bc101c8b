"""Dividend model - Cash dividends received per symbol."""

from datetime import date, datetime
from typing import Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import CheckConstraint, UniqueConstraint
from .mixins import IDMixin, utcnow
from .types import FlexibleDate, NaiveDateTime

# Absolute tolerance when matching stored amounts
DIVIDEND_AMOUNT_TOLERANCE = 0.001


class Dividend(SQLModel, IDMixin, table=True):
    """Dividend received on a date."""

    __tablename__ = "dividends"

    symbol: str = Field(foreign_key="symbols.symbol", nullable=False, index=True)
    received: date = Field(sa_type=FlexibleDate, nullable=False, index=True)
    amount: float = Field(nullable=False)
    created_at: Optional[datetime] = Field(default_factory=utcnow, sa_type=NaiveDateTime)

    __table_args__ = (
        CheckConstraint("amount > 0", name="check_dividend_amount_positive"),
        UniqueConstraint("symbol", "received", "amount", name="uq_dividends_symbol_received_amount"),
    )

"""Symbol model - One row per ticker referenced by any instrument."""

from datetime import date
from typing import Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import CheckConstraint
from .mixins import TimestampMixin
from .types import FlexibleDate


class Symbol(SQLModel, TimestampMixin, table=True):
    """Ticker with display currency and last-known market data."""

    __tablename__ = "symbols"

    symbol: str = Field(primary_key=True)  # Upper-cased ticker
    currency: str = Field(default="USD", nullable=False)
    price: Optional[float] = Field(default=None)  # Last-known price
    dividend: Optional[float] = Field(default=None)  # Dividend per share
    ex_dividend_date: Optional[date] = Field(default=None, sa_type=FlexibleDate)
    pe_ratio: Optional[float] = Field(default=None)

    __table_args__ = (
        CheckConstraint("symbol <> ''", name="check_symbol_not_empty"),
    )

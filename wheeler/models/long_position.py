"""LongPosition model - Stock purchases, open until closed with an exit price."""

from datetime import date
from typing import Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import CheckConstraint
from .mixins import IDMixin, TimestampMixin
from .types import FlexibleDate


class LongPosition(SQLModel, IDMixin, TimestampMixin, table=True):
    """Long stock position. `closed` and `exit_price` are set together or not at all."""

    __tablename__ = "long_positions"

    symbol: str = Field(foreign_key="symbols.symbol", nullable=False, index=True)
    opened: date = Field(sa_type=FlexibleDate, nullable=False, index=True)
    closed: Optional[date] = Field(default=None, sa_type=FlexibleDate, index=True)
    shares: int = Field(nullable=False)
    buy_price: float = Field(nullable=False)
    exit_price: Optional[float] = Field(default=None)

    __table_args__ = (
        CheckConstraint("shares > 0", name="check_long_shares_positive"),
        CheckConstraint("buy_price > 0", name="check_long_buy_price_positive"),
        CheckConstraint("(closed IS NULL) = (exit_price IS NULL)", name="check_long_close_pair"),
        CheckConstraint("closed IS NULL OR closed >= opened", name="check_long_closed_after_opened"),
    )

    @property
    def is_open(self) -> bool:
        return self.closed is None

    @property
    def amount(self) -> float:
        """Cost basis: shares x buy price."""
        return self.shares * self.buy_price

    def profit_loss(self, exit_price: float) -> float:
        return (exit_price - self.buy_price) * self.shares

    @property
    def realized_gain(self) -> float:
        """Capital gain for a closed position, 0 while open."""
        if self.closed is None or self.exit_price is None:
            return 0.0
        return self.profit_loss(self.exit_price)

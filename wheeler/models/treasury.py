"""Treasury model - Treasury bill holdings keyed by CUSIP."""

from datetime import date
from typing import Optional
from sqlmodel import SQLModel, Field, Column
from sqlalchemy import CheckConstraint, Float
from .mixins import TimestampMixin
from .types import FlexibleDate


class Treasury(SQLModel, TimestampMixin, table=True):
    """Treasury bill. A non-null exit price marks the bond as sold."""

    __tablename__ = "treasuries"

    cuspid: str = Field(primary_key=True)  # CUSIP; column name kept as stored
    purchased: date = Field(sa_type=FlexibleDate, nullable=False)
    maturity: date = Field(sa_type=FlexibleDate, nullable=False)
    amount: float = Field(nullable=False)  # Face amount
    yield_pct: float = Field(sa_column=Column("yield", Float, nullable=False))
    buy_price: float = Field(nullable=False)
    current_value: Optional[float] = Field(default=None)
    exit_price: Optional[float] = Field(default=None)

    __table_args__ = (
        CheckConstraint("cuspid <> ''", name="check_treasury_cuspid_not_empty"),
        CheckConstraint("amount > 0", name="check_treasury_amount_positive"),
        CheckConstraint('"yield" > 0', name="check_treasury_yield_positive"),
        CheckConstraint("buy_price > 0", name="check_treasury_buy_price_positive"),
        CheckConstraint("maturity >= purchased", name="check_treasury_maturity_after_purchase"),
    )

    @property
    def is_active(self) -> bool:
        return self.exit_price is None

    @property
    def profit_loss(self) -> float:
        """Exit price if sold, else current value if known, else face amount; minus buy price."""
        if self.exit_price is not None:
            return self.exit_price - self.buy_price
        if self.current_value is not None:
            return self.current_value - self.buy_price
        return self.amount - self.buy_price

    @property
    def roi(self) -> float:
        if self.buy_price == 0:
            return 0.0
        return self.profit_loss / self.buy_price * 100

    @property
    def interest(self) -> float:
        """Interest earned; nothing is earned until the bond is sold."""
        if self.exit_price is None:
            return 0.0
        return self.exit_price - self.buy_price

    def days_remaining(self, today: date) -> int:
        if self.exit_price is not None:
            return 0
        return (self.maturity - today).days

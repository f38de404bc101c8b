"""Option model - Short puts and calls written against the portfolio."""

from datetime import date
from typing import Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import CheckConstraint, Index
from .mixins import IDMixin, TimestampMixin
from .types import FlexibleDate

# $0.65 per contract, charged on open and again on close
OPTION_COMMISSION_PER_CONTRACT = 0.65

# Shares represented by one option contract
CONTRACT_MULTIPLIER = 100

PUT = "Put"
CALL = "Call"
OPTION_TYPES = (PUT, CALL)


class Option(SQLModel, IDMixin, TimestampMixin, table=True):
    """Option contract. Premium and exit price are per share."""

    __tablename__ = "options"

    symbol: str = Field(foreign_key="symbols.symbol", nullable=False, index=True)
    type: str = Field(nullable=False)  # Put, Call
    opened: date = Field(sa_type=FlexibleDate, nullable=False, index=True)
    closed: Optional[date] = Field(default=None, sa_type=FlexibleDate, index=True)
    strike: float = Field(nullable=False)
    expiration: date = Field(sa_type=FlexibleDate, nullable=False, index=True)
    premium: float = Field(nullable=False)
    contracts: int = Field(nullable=False)
    exit_price: Optional[float] = Field(default=None)
    commission: float = Field(default=0.0, nullable=False)  # Accumulated, open + close
    current_price: Optional[float] = Field(default=None)  # Informational only

    __table_args__ = (
        CheckConstraint("type IN ('Put', 'Call')", name="check_option_type"),
        CheckConstraint("strike > 0", name="check_option_strike_positive"),
        CheckConstraint("premium >= 0", name="check_option_premium_non_negative"),
        CheckConstraint("contracts > 0", name="check_option_contracts_positive"),
        CheckConstraint("commission >= 0", name="check_option_commission_non_negative"),
        CheckConstraint("(closed IS NULL) = (exit_price IS NULL)", name="check_option_close_pair"),
        CheckConstraint("expiration >= opened", name="check_option_expiration_after_opened"),
        CheckConstraint(
            "closed IS NULL OR (closed >= opened AND closed <= expiration)",
            name="check_option_closed_window",
        ),
        Index("ix_options_symbol_type", "symbol", "type"),
    )

    @property
    def is_open(self) -> bool:
        return self.closed is None

    @property
    def exposure(self) -> float:
        """Capital needed to accept assignment; calls carry no put exposure."""
        if self.type != PUT:
            return 0.0
        return self.strike * self.contracts * CONTRACT_MULTIPLIER

    @property
    def notional_premium(self) -> float:
        """Cash received when the contracts were sold."""
        return self.premium * self.contracts * CONTRACT_MULTIPLIER

    @property
    def realized_premium(self) -> float:
        """Premium kept, realized at open.

        Open options count as if held to expiration (exit price 0).
        """
        exit_price = self.exit_price or 0.0
        return (self.premium - exit_price) * self.contracts * CONTRACT_MULTIPLIER

    def days_to_expiration(self, today: date) -> int:
        return (self.expiration - today).days

    def expiration_status(self, today: date) -> str:
        days = self.days_to_expiration(today)
        if days < 0:
            return "Expired"
        if days <= 7:
            return "Critical"
        if days <= 30:
            return "Warning"
        return "Active"

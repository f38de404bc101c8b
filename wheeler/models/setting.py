"""Setting model - Named configuration values (e.g. market data API key)."""

from typing import Optional
from sqlmodel import SQLModel, Field
from .mixins import TimestampMixin


class Setting(SQLModel, TimestampMixin, table=True):
    """Configuration row keyed by upper-cased name."""

    __tablename__ = "settings"

    name: str = Field(primary_key=True)
    value: Optional[str] = Field(default=None)
    description: Optional[str] = Field(default=None)

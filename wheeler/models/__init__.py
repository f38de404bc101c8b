"""SQLModel exports for all database tables."""

# Catalog Tables
from .symbol import Symbol
from .setting import Setting
from .schema_migration import SchemaMigration

# Instrument Tables
from .long_position import LongPosition
from .option import (
    Option,
    OPTION_COMMISSION_PER_CONTRACT,
    CONTRACT_MULTIPLIER,
    OPTION_TYPES,
    PUT,
    CALL,
)
from .dividend import Dividend, DIVIDEND_AMOUNT_TOLERANCE
from .treasury import Treasury

# Metric Tables
from .metric import Metric, MetricType

__all__ = [
    # Catalog
    "Symbol",
    "Setting",
    "SchemaMigration",
    # Instruments
    "LongPosition",
    "Option",
    "OPTION_COMMISSION_PER_CONTRACT",
    "CONTRACT_MULTIPLIER",
    "OPTION_TYPES",
    "PUT",
    "CALL",
    "Dividend",
    "DIVIDEND_AMOUNT_TOLERANCE",
    "Treasury",
    # Metrics
    "Metric",
    "MetricType",
]

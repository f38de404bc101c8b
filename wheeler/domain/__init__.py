"""Domain layer - CRUD operations for all portfolio models.

Every operation takes an explicit Session; none consults the active-database
pointer. Failures surface as wheeler.core.exceptions errors.

Usage:
    from wheeler.db import get_db_session
    from wheeler.domain import OptionOperations

    with get_db_session() as session:
        option = OptionOperations.create(session, "AAPL", "Put", "2025-01-10", 140, "2025-02-21", 2.5, 1)
        OptionOperations.close_by_id(session, option.id, "2025-01-31", 0.4)
"""

from .symbol_operations import SymbolOperations
from .option_operations import OptionOperations, normalize_option_type, opening_commission
from .long_position_operations import LongPositionOperations
from .dividend_operations import DividendOperations
from .treasury_operations import TreasuryOperations
from .setting_operations import SettingOperations
from .metric_operations import MetricOperations, MetricPoint, normalize_metric_type

__all__ = [
    "SymbolOperations",
    "OptionOperations",
    "normalize_option_type",
    "opening_commission",
    "LongPositionOperations",
    "DividendOperations",
    "TreasuryOperations",
    "SettingOperations",
    "MetricOperations",
    "MetricPoint",
    "normalize_metric_type",
]

"""Options Index - Composite multi-key index over a fetched set of options.

The index is built once per request from a fresh read and never touches
storage. Views:

- by_id: id string -> option
- by_symbol: ticker -> options
- by_type: 'Put' / 'Call' -> options
- by_opened: year -> month -> options
- by_expiration: year -> month -> day -> options
- open: options without a closed date
- by_closed: year -> month -> options (closed options only)

Buckets preserve input order. Every option sits in exactly one of
`open` / `by_closed`.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from wheeler.core.exceptions import ValidationError
from wheeler.models import CALL, PUT, Option

OptionBucket = Tuple[Option, ...]

# Bookkeeping columns ignored when comparing two indexes by value
_IGNORED_FIELDS = {"created_at", "updated_at"}


class OptionStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    ALL = "all"


@dataclass(frozen=True)
class DateRange:
    """Closed date interval; a missing bound is unbounded."""

    start: Optional[date] = None
    end: Optional[date] = None

    def contains(self, value: Optional[date]) -> bool:
        if value is None:
            return False
        if self.start is not None and value < self.start:
            return False
        if self.end is not None and value > self.end:
            return False
        return True


@dataclass(frozen=True)
class StrikeRange:
    """Closed strike interval; a missing bound is unbounded."""

    min: Optional[float] = None
    max: Optional[float] = None

    def contains(self, value: float) -> bool:
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True


@dataclass
class OptionFilter:
    """Combined selector; every given criterion must hold.

    date_range applies to expiration. closed_range admits closed options only.
    """

    symbols: Optional[Sequence[str]] = None
    types: Optional[Sequence[str]] = None
    status: OptionStatus = OptionStatus.ALL
    date_range: Optional[DateRange] = None
    opened_range: Optional[DateRange] = None
    closed_range: Optional[DateRange] = None
    strike_range: Optional[StrikeRange] = None

    def __post_init__(self):
        try:
            self.status = OptionStatus(self.status)
        except ValueError:
            raise ValidationError(
                f"status must be one of open, closed, all; got {self.status!r}",
                entity="option filter",
                field="status",
            )
        # A bare ticker or type means a one-element selection
        if isinstance(self.symbols, str):
            self.symbols = [self.symbols]
        if isinstance(self.types, str):
            self.types = [self.types]
        if self.symbols:
            self.symbols = [s.strip().upper() for s in self.symbols]
        if self.types:
            self.types = [t.strip().capitalize() for t in self.types]

    def matches(self, option: Option) -> bool:
        if self.symbols and option.symbol not in self.symbols:
            return False
        if self.types and option.type not in self.types:
            return False
        if self.status is OptionStatus.OPEN and option.closed is not None:
            return False
        if self.status is OptionStatus.CLOSED and option.closed is None:
            return False
        if self.date_range is not None and not self.date_range.contains(option.expiration):
            return False
        if self.opened_range is not None and not self.opened_range.contains(option.opened):
            return False
        if self.closed_range is not None and not self.closed_range.contains(option.closed):
            return False
        if self.strike_range is not None and not self.strike_range.contains(option.strike):
            return False
        return True


def _id_key(option: Option) -> str:
    return str(option.id)


def _sort_key(option: Option) -> Tuple[int, Any]:
    # Unsaved options (id None) sort first
    return (0, 0) if option.id is None else (1, option.id)


def _value(option: Option) -> Dict[str, Any]:
    return option.model_dump(exclude=_IGNORED_FIELDS)


def _same_options(left: Iterable[Option], right: Iterable[Option]) -> bool:
    left_values = [_value(o) for o in sorted(left, key=_sort_key)]
    right_values = [_value(o) for o in sorted(right, key=_sort_key)]
    return left_values == right_values


def _same_tree(left: Any, right: Any) -> bool:
    """Compare nested date maps; leaves are option buckets compared order-independently."""
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        if set(left) != set(right):
            return False
        return all(_same_tree(left[key], right[key]) for key in left)
    if isinstance(left, Mapping) or isinstance(right, Mapping):
        return False
    return _same_options(left, right)


def _freeze(buckets: Dict[Any, Any]) -> Dict[Any, Any]:
    """Turn list leaves into tuples, recursively."""
    return {
        key: _freeze(value) if isinstance(value, dict) else tuple(value)
        for key, value in buckets.items()
    }


@dataclass(frozen=True, eq=False)
class OptionsIndex:
    """Read-only composite index. Build with OptionsIndex.build(options)."""

    by_id: Mapping[str, Option] = field(default_factory=dict)
    by_symbol: Mapping[str, OptionBucket] = field(default_factory=dict)
    by_type: Mapping[str, OptionBucket] = field(default_factory=dict)
    by_opened: Mapping[int, Mapping[int, OptionBucket]] = field(default_factory=dict)
    by_expiration: Mapping[int, Mapping[int, Mapping[int, OptionBucket]]] = field(default_factory=dict)
    open: OptionBucket = ()
    by_closed: Mapping[int, Mapping[int, OptionBucket]] = field(default_factory=dict)

    @classmethod
    def build(cls, options: Iterable[Option]) -> "OptionsIndex":
        """Index options in one pass, preserving input order within each bucket."""
        by_id: Dict[str, Option] = {}
        by_symbol: Dict[str, List[Option]] = {}
        by_type: Dict[str, List[Option]] = {PUT: [], CALL: []}
        by_opened: Dict[int, Dict[int, List[Option]]] = {}
        by_expiration: Dict[int, Dict[int, Dict[int, List[Option]]]] = {}
        open_options: List[Option] = []
        by_closed: Dict[int, Dict[int, List[Option]]] = {}

        for option in options:
            by_id[_id_key(option)] = option
            by_symbol.setdefault(option.symbol, []).append(option)
            by_type.setdefault(option.type, []).append(option)

            opened = option.opened
            by_opened.setdefault(opened.year, {}).setdefault(opened.month, []).append(option)

            expiration = option.expiration
            (
                by_expiration.setdefault(expiration.year, {})
                .setdefault(expiration.month, {})
                .setdefault(expiration.day, [])
                .append(option)
            )

            if option.closed is None:
                open_options.append(option)
            else:
                closed = option.closed
                by_closed.setdefault(closed.year, {}).setdefault(closed.month, []).append(option)

        return cls(
            by_id=by_id,
            by_symbol=_freeze(by_symbol),
            by_type=_freeze(by_type),
            by_opened=_freeze(by_opened),
            by_expiration=_freeze(by_expiration),
            open=tuple(open_options),
            by_closed=_freeze(by_closed),
        )

    def __len__(self) -> int:
        return len(self.by_id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OptionsIndex):
            return NotImplemented
        if set(self.by_id) != set(other.by_id):
            return False
        if any(_value(self.by_id[k]) != _value(other.by_id[k]) for k in self.by_id):
            return False
        return (
            _same_tree(self.by_symbol, other.by_symbol)
            and _same_tree(self.by_type, other.by_type)
            and _same_tree(self.by_opened, other.by_opened)
            and _same_tree(self.by_expiration, other.by_expiration)
            and _same_options(self.open, other.open)
            and _same_tree(self.by_closed, other.by_closed)
        )

    __hash__ = None

    def get(self, option_id: Any) -> Optional[Option]:
        return self.by_id.get(str(option_id))

    def filter(self, criteria: Optional[OptionFilter] = None) -> List[Option]:
        """Answer a combined filter query.

        The base set comes from the most selective view available (symbols,
        then types, then everything); the remaining criteria are applied as a
        linear filter. Results are de-duplicated and sorted by id.
        """
        criteria = criteria or OptionFilter()

        if criteria.symbols:
            base = [o for s in criteria.symbols for o in self.by_symbol.get(s, ())]
        elif criteria.types:
            base = [o for t in criteria.types for o in self.by_type.get(t, ())]
        else:
            base = list(self.by_id.values())

        seen: Dict[str, Option] = {}
        for option in base:
            if criteria.matches(option):
                seen.setdefault(_id_key(option), option)

        return sorted(seen.values(), key=_sort_key)

    # Convenience queries

    def open_by_symbols(self, symbols: Sequence[str]) -> List[Option]:
        return self.filter(OptionFilter(symbols=symbols, status=OptionStatus.OPEN))

    def closed_in_range(self, start: date, end: date) -> List[Option]:
        return self.filter(OptionFilter(status=OptionStatus.CLOSED, closed_range=DateRange(start, end)))

    def by_type_and_symbol(self, option_type: str, symbol: str) -> List[Option]:
        return self.filter(OptionFilter(symbols=[symbol], types=[option_type]))

    def expiring_in_range(self, start: date, end: date) -> List[Option]:
        return self.filter(OptionFilter(date_range=DateRange(start, end)))

    def opened_in(self, year: int, month: int) -> OptionBucket:
        return self.by_opened.get(year, {}).get(month, ())

    def expiring_on(self, day: date) -> OptionBucket:
        return self.by_expiration.get(day.year, {}).get(day.month, {}).get(day.day, ())

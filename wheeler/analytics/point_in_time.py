"""Point-in-time reconstruction of portfolio state for a calendar day.

An instrument is active on day D iff opened <= D and (closed is null or
closed > D). An instrument closed on D is therefore NOT active on D.
Treasuries use `purchased` as the open date and a null exit price as the
active marker: once sold, a treasury is excluded from every day.

Everything here is pure: same inputs, same outputs, no storage access.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional, Tuple

from wheeler.models import CALL, PUT, LongPosition, MetricType, Option, Treasury


def is_active_on(day: date, opened: date, closed: Optional[date]) -> bool:
    return opened <= day and (closed is None or closed > day)


def treasury_active_on(treasury: Treasury, day: date) -> bool:
    return treasury.purchased <= day and treasury.exit_price is None


@dataclass
class ActiveInstruments:
    """Instruments active on one day."""

    day: date
    options: List[Option] = field(default_factory=list)
    positions: List[LongPosition] = field(default_factory=list)
    treasuries: List[Treasury] = field(default_factory=list)


def active_on(
    day: date,
    options: Iterable[Option],
    positions: Iterable[LongPosition],
    treasuries: Iterable[Treasury],
) -> ActiveInstruments:
    """Select the instruments active on `day`, preserving input order."""
    return ActiveInstruments(
        day=day,
        options=[o for o in options if is_active_on(day, o.opened, o.closed)],
        positions=[p for p in positions if is_active_on(day, p.opened, p.closed)],
        treasuries=[t for t in treasuries if treasury_active_on(t, day)],
    )


@dataclass(frozen=True)
class PortfolioState:
    """The eight aggregates describing the portfolio on one day."""

    day: date
    treasury_value: float = 0.0
    long_value: float = 0.0
    long_count: int = 0
    put_exposure: float = 0.0
    open_put_premium: float = 0.0
    open_put_count: int = 0
    open_call_premium: float = 0.0
    open_call_count: int = 0

    def metrics(self) -> List[Tuple[MetricType, float]]:
        """(kind, value) pairs in snapshot write order."""
        return [
            (MetricType.TREASURY_VALUE, self.treasury_value),
            (MetricType.LONG_VALUE, self.long_value),
            (MetricType.LONG_COUNT, float(self.long_count)),
            (MetricType.PUT_EXPOSURE, self.put_exposure),
            (MetricType.OPEN_PUT_PREMIUM, self.open_put_premium),
            (MetricType.OPEN_PUT_COUNT, float(self.open_put_count)),
            (MetricType.OPEN_CALL_PREMIUM, self.open_call_premium),
            (MetricType.OPEN_CALL_COUNT, float(self.open_call_count)),
        ]

    def to_dict(self) -> dict:
        result = {"date": self.day.isoformat()}
        result.update({kind.value: value for kind, value in self.metrics()})
        return result


def reconstruct(
    day: date,
    options: Iterable[Option],
    positions: Iterable[LongPosition],
    treasuries: Iterable[Treasury],
) -> PortfolioState:
    """Compute the eight aggregates for `day`."""
    active = active_on(day, options, positions, treasuries)

    puts = [o for o in active.options if o.type == PUT]
    calls = [o for o in active.options if o.type == CALL]

    return PortfolioState(
        day=day,
        treasury_value=float(sum(t.amount for t in active.treasuries)),
        long_value=float(sum(p.amount for p in active.positions)),
        long_count=len(active.positions),
        put_exposure=float(sum(o.exposure for o in puts)),
        open_put_premium=float(sum(o.notional_premium for o in puts)),
        open_put_count=len(puts),
        open_call_premium=float(sum(o.notional_premium for o in calls)),
        open_call_count=len(calls),
    )

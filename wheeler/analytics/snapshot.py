"""Comprehensive Snapshot Workflow - Backfills daily portfolio metrics.

For a window of N days ending today:
1. Reads options, long positions and treasuries once, in one read phase
2. Reconstructs the portfolio state for each day (oldest first)
3. Appends one metric row per (day, kind), kinds in a fixed order

The metric log is append-only: re-running for the same day appends new rows.
Each row commits on its own, so a failure or cancellation keeps the rows
already written.

Does NOT contain:
- Aggregate definitions (delegates to point_in_time)
- Database CRUD logic (delegates to domain)
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, List, Optional, Tuple

from sqlmodel import Session

from wheeler.core.config import settings
from wheeler.core.exceptions import OperationCancelled, ValidationError
from wheeler.domain import (
    LongPositionOperations,
    MetricOperations,
    OptionOperations,
    TreasuryOperations,
)
from wheeler.models import LongPosition, MetricType, Option, Treasury
from .point_in_time import PortfolioState, reconstruct

logger = logging.getLogger(__name__)

METRICS_PER_DAY = len(MetricType)


@dataclass
class SnapshotResult:
    """Result of a snapshot run."""

    days: int
    start_day: Optional[date] = None
    end_day: Optional[date] = None
    rows_written: int = 0
    duration_seconds: float = 0.0
    states: List[PortfolioState] = field(default_factory=list)

    @property
    def expected_rows(self) -> int:
        return self.days * METRICS_PER_DAY

    @property
    def complete(self) -> bool:
        return self.rows_written == self.expected_rows

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "days": self.days,
            "start_day": self.start_day.isoformat() if self.start_day else None,
            "end_day": self.end_day.isoformat() if self.end_day else None,
            "rows_written": self.rows_written,
            "expected_rows": self.expected_rows,
            "duration_seconds": round(self.duration_seconds, 2),
        }


@dataclass
class SnapshotConfig:
    """Configuration for the snapshot workflow."""

    # Days in the backfill window, ending today
    days: int = settings.DEFAULT_SNAPSHOT_DAYS

    # When False, states are computed and returned but nothing is written
    write_metrics: bool = True


def snapshot_window(days: int, today: date) -> List[date]:
    """Days covered by a window of `days` ending `today`, oldest first."""
    return [today - timedelta(days=offset) for offset in reversed(range(days))]


class ComprehensiveSnapshot:
    """Reconstructs historical daily state and appends it to the metric log.

    Usage:
        from wheeler.db import get_session_context
        from wheeler.analytics import ComprehensiveSnapshot

        with get_session_context() as session:
            result = ComprehensiveSnapshot(session).run(days=30)
            print(result.to_dict())
    """

    def __init__(
        self,
        session: Session,
        config: Optional[SnapshotConfig] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        """Initialize snapshot workflow.

        Args:
            session: Database session
            config: Workflow configuration
            cancel_event: When set, the run stops before its next storage call
        """
        self.session = session
        self.config = config or SnapshotConfig()
        self.cancel_event = cancel_event

    def _check_cancelled(self, stage: str) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            logger.warning(f"Snapshot cancelled before {stage}")
            raise OperationCancelled(f"Snapshot cancelled before {stage}", entity="metric")

    def load(self) -> Tuple[List[Option], List[LongPosition], List[Treasury]]:
        """Read options, long positions and treasuries in one read phase."""
        self._check_cancelled("reading instruments")
        options = OptionOperations.get_all(self.session)
        positions = LongPositionOperations.get_all(self.session)
        treasuries = TreasuryOperations.get_all(self.session)
        # End the read transaction before the first write
        self.session.commit()

        logger.info(
            f"Loaded {len(options)} options, {len(positions)} long positions, "
            f"{len(treasuries)} treasuries"
        )
        return options, positions, treasuries

    def run(self, days: Optional[int] = None, today: Optional[date] = None) -> SnapshotResult:
        """Run the snapshot.

        Args:
            days: Window size (default from config); must be a positive integer
            today: Last day of the window (default: current calendar date)

        Returns:
            SnapshotResult with 8 x days rows written

        Raises:
            ValidationError: If days is not a positive integer
            OperationCancelled: If the cancel event is set
            BackendError: If a write fails; earlier rows remain
        """
        days = self.config.days if days is None else days
        if isinstance(days, bool) or not isinstance(days, int) or days < 1:
            raise ValidationError(f"days must be a positive integer, got {days!r}", entity="snapshot", field="days")

        today = today or date.today()
        if days > today.toordinal():
            raise ValidationError(
                f"days={days} reaches back before {date.min.isoformat()}", entity="snapshot", field="days"
            )
        window = snapshot_window(days, today)
        result = SnapshotResult(days=days, start_day=window[0], end_day=window[-1])
        start_time = time.monotonic()

        logger.info(f"Starting snapshot for {days} day(s): {window[0]} .. {window[-1]}")

        options, positions, treasuries = self.load()

        for day in window:
            state = reconstruct(day, options, positions, treasuries)
            result.states.append(state)

            if not self.config.write_metrics:
                continue

            created = datetime.combine(day, datetime.min.time())
            for kind, value in state.metrics():
                self._check_cancelled(f"writing {kind.value} for {day}")
                MetricOperations.create(self.session, kind, value, created=created)
                result.rows_written += 1

            logger.debug(f"Snapshot {day}: {state.to_dict()}")

        result.duration_seconds = time.monotonic() - start_time
        logger.info(
            f"Snapshot complete: {result.rows_written} metric rows for {days} day(s) "
            f"in {result.duration_seconds:.2f}s"
        )
        return result


def snapshot(
    session: Session,
    days: int,
    today: Optional[date] = None,
    cancel_event: Optional[threading.Event] = None,
) -> SnapshotResult:
    """Shorthand for ComprehensiveSnapshot(session, cancel_event=...).run(days, today)."""
    return ComprehensiveSnapshot(session, cancel_event=cancel_event).run(days=days, today=today)

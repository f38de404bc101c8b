"""Domain operations for Metric model - Append-only metric log."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Union

from sqlalchemy import delete, func
from sqlmodel import Session, select

from wheeler.core.dates import DateInput, coerce_date
from wheeler.core.exceptions import ValidationError
from wheeler.models import Metric, MetricType
from wheeler.models.mixins import utcnow
from .guards import finish, not_found, save, storage_errors

logger = logging.getLogger(__name__)

ENTITY = "metric"

MetricKind = Union[MetricType, str]


def normalize_metric_type(metric_type: MetricKind) -> MetricType:
    """Resolve a kind name to MetricType; anything outside the eight kinds is rejected."""
    try:
        return MetricType(metric_type)
    except ValueError:
        raise ValidationError(
            f"Unknown metric type {metric_type!r}", entity=ENTITY, field="type"
        )


def _start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


@dataclass
class MetricPoint:
    """One chart point: calendar date and value."""

    day: date
    value: float

    def to_dict(self) -> dict:
        return {"date": self.day.isoformat(), "value": self.value}


class MetricOperations:
    """Core operations for the Metric log.

    Rows are appended by the snapshot workflow; update and delete exist for
    administrative correction only.
    """

    @staticmethod
    def create(
        session: Session,
        metric_type: MetricKind,
        value: float,
        created: Optional[Union[datetime, DateInput]] = None,
        commit: bool = True,
    ) -> Metric:
        """Append a metric row.

        Args:
            session: Database session
            metric_type: One of the eight MetricType kinds
            value: Measured value
            created: Timestamp; a date means midnight of that day. Defaults to now (UTC).
            commit: If True, commit immediately. If False, caller must commit.

        Returns:
            Created metric with populated id

        Raises:
            ValidationError: If the kind is unknown or value is not a number
        """
        kind = normalize_metric_type(metric_type)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(f"Metric value must be a number, got {value!r}", entity=ENTITY, field="value")

        if created is None:
            stamp = utcnow()
        elif isinstance(created, datetime):
            stamp = created
        else:
            stamp = _start_of_day(coerce_date(created, "created", ENTITY))

        row = Metric(created=stamp, type=kind.value, value=float(value))
        return save(session, row, ENTITY, commit=commit)

    @staticmethod
    def get_by_id(session: Session, metric_id: int) -> Optional[Metric]:
        return session.get(Metric, metric_id)

    @staticmethod
    def get_by_type(session: Session, metric_type: MetricKind) -> List[Metric]:
        """Get all rows of one kind ordered by created ascending (id breaks ties)."""
        kind = normalize_metric_type(metric_type)
        stmt = (
            select(Metric)
            .where(Metric.type == kind.value)
            .order_by(Metric.created, Metric.id)
        )
        return list(session.exec(stmt).all())

    @staticmethod
    def get_by_date_range(
        session: Session,
        start_date: DateInput,
        end_date: DateInput,
        metric_type: Optional[MetricKind] = None,
    ) -> List[Metric]:
        """Get rows whose created calendar date falls in [start_date, end_date].

        Args:
            session: Database session
            start_date: First day (inclusive)
            end_date: Last day (inclusive)
            metric_type: Optional kind filter

        Returns:
            Metrics ordered by created, then id
        """
        start = _start_of_day(coerce_date(start_date, "start_date", ENTITY))
        end = _start_of_day(coerce_date(end_date, "end_date", ENTITY) + timedelta(days=1))

        stmt = select(Metric).where(Metric.created >= start, Metric.created < end)
        if metric_type is not None:
            stmt = stmt.where(Metric.type == normalize_metric_type(metric_type).value)
        stmt = stmt.order_by(Metric.created, Metric.id)
        return list(session.exec(stmt).all())

    @staticmethod
    def get_all(session: Session) -> List[Metric]:
        stmt = select(Metric).order_by(Metric.created, Metric.id)
        return list(session.exec(stmt).all())

    @staticmethod
    def count(session: Session, metric_type: Optional[MetricKind] = None) -> int:
        stmt = select(func.count()).select_from(Metric)
        if metric_type is not None:
            stmt = stmt.where(Metric.type == normalize_metric_type(metric_type).value)
        return int(session.exec(stmt).one())

    @staticmethod
    def update_value(session: Session, metric_id: int, value: float, commit: bool = True) -> Metric:
        """Correct the value of a metric row.

        Raises:
            NotFoundError: If the row does not exist
        """
        row = session.get(Metric, metric_id)
        if row is None:
            raise not_found(ENTITY, metric_id, "id")
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(f"Metric value must be a number, got {value!r}", entity=ENTITY, field="value")

        row.value = float(value)
        session.add(row)
        finish(session, ENTITY, "update", commit)
        return row

    @staticmethod
    def delete(session: Session, metric_id: int, commit: bool = True) -> None:
        """Delete a metric row.

        Raises:
            NotFoundError: If the row does not exist
        """
        row = session.get(Metric, metric_id)
        if row is None:
            raise not_found(ENTITY, metric_id, "id")
        session.delete(row)
        finish(session, ENTITY, "delete", commit)

    @staticmethod
    def delete_by_type(session: Session, metric_type: MetricKind, commit: bool = True) -> int:
        """Delete every row of one kind. Returns the number of rows deleted."""
        kind = normalize_metric_type(metric_type)
        stmt = delete(Metric).where(Metric.type == kind.value).execution_options(synchronize_session=False)

        with storage_errors(session, ENTITY, "delete"):
            deleted = session.exec(stmt).rowcount
        finish(session, ENTITY, "delete", commit)

        logger.info(f"Deleted {deleted} {kind.value} metric(s)")
        return deleted

    @staticmethod
    def chart_data(session: Session, latest_per_day: bool = False) -> Dict[str, List[MetricPoint]]:
        """Per-kind (date, value) series in ascending date order.

        Every kind is present, possibly with an empty series. Re-run snapshots
        leave several rows per (kind, day); all are returned unless
        latest_per_day is set, in which case the last written row wins.
        """
        series: Dict[str, List[MetricPoint]] = {kind.value: [] for kind in MetricType}

        for row in MetricOperations.get_all(session):
            points = series.setdefault(row.type, [])
            point = MetricPoint(day=row.created.date(), value=row.value)
            if latest_per_day and points and points[-1].day == point.day:
                points[-1] = point
            else:
                points.append(point)

        return series

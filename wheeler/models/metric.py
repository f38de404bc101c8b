"""Metric model - Append-only log of portfolio measurements."""

from datetime import datetime
from enum import Enum
from sqlmodel import SQLModel, Field
from sqlalchemy import CheckConstraint, Index
from .mixins import IDMixin, utcnow
from .types import NaiveDateTime


class MetricType(str, Enum):
    """The closed set of metric kinds, in snapshot write order."""

    TREASURY_VALUE = "TreasuryValue"
    LONG_VALUE = "LongValue"
    LONG_COUNT = "LongCount"
    PUT_EXPOSURE = "PutExposure"
    OPEN_PUT_PREMIUM = "OpenPutPremium"
    OPEN_PUT_COUNT = "OpenPutCount"
    OPEN_CALL_PREMIUM = "OpenCallPremium"
    OPEN_CALL_COUNT = "OpenCallCount"


_METRIC_TYPE_SQL = ", ".join(f"'{t.value}'" for t in MetricType)


class Metric(SQLModel, IDMixin, table=True):
    """One measurement of one kind, stamped with the day it describes."""

    __tablename__ = "metrics"

    created: datetime = Field(default_factory=utcnow, nullable=False, sa_type=NaiveDateTime)
    type: str = Field(nullable=False)
    value: float = Field(nullable=False)

    __table_args__ = (
        CheckConstraint(f"type IN ({_METRIC_TYPE_SQL})", name="check_metric_type"),
        Index("ix_metrics_type_created", "type", "created"),
    )

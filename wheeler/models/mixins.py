"""Reusable model mixins for database tables."""

from datetime import datetime, timezone
from typing import Optional
from sqlmodel import Field
from .types import NaiveDateTime


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how SQLite DATETIME columns round-trip."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class IDMixin:
    """Mixin for auto-increment integer primary key."""

    id: Optional[int] = Field(default=None, primary_key=True)


class TimestampMixin:
    """Mixin for created_at/updated_at timestamps."""

    created_at: datetime = Field(default_factory=utcnow, nullable=False, sa_type=NaiveDateTime)
    updated_at: Optional[datetime] = Field(
        default_factory=utcnow, sa_type=NaiveDateTime, sa_column_kwargs={"onupdate": utcnow}
    )

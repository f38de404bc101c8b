"""Column types shared by the table models."""

from sqlalchemy import Date, DateTime
from sqlalchemy.dialects import sqlite
from sqlalchemy.types import TypeDecorator

# Leading calendar date of a stored DATE value; any time or zone suffix is ignored
_DATE_PREFIX = r"(\d{4})-(\d{2})-(\d{2})"

# Timestamps are stored as naive UTC on every SQLModel release
NaiveDateTime = DateTime(timezone=False)


class FlexibleDate(TypeDecorator):
    """DATE column that reads `YYYY-MM-DD` with or without a trailing time.

    Rows written by other tools may hold `2024-03-15 00:00:00` or
    `2024-03-15T00:00:00Z`; both load as `date(2024, 3, 15)`. Writes always
    use the plain `YYYY-MM-DD` form.
    """

    impl = Date
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(sqlite.DATE(regexp=_DATE_PREFIX))
        return dialect.type_descriptor(Date())

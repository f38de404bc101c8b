"""Date and timestamp parsing at the storage and CLI boundaries.

Dates are accepted as YYYY-MM-DD (plus the ISO 8601 variants SQLite may hand
back) and emitted as YYYY-MM-DD. Timestamps tolerate SQLite DATETIME text,
ISO 8601 with or without a zone, and nanosecond precision.
"""

import re
from datetime import date, datetime
from typing import Optional, Union

from wheeler.core.exceptions import ValidationError

DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
)

TIMESTAMP_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%d",
)

# strptime's %f stops at microseconds
_EXCESS_FRACTION = re.compile(r"(\.\d{6})\d+")

DateInput = Union[date, datetime, str]


def parse_date(value: str, field: str = "date", entity: Optional[str] = None) -> date:
    """Parse a date string, stripping any time component.

    Raises:
        ValidationError: If no supported format matches
    """
    text = value.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValidationError(f"unable to parse {field}: {value!r} (expected YYYY-MM-DD)", entity=entity, field=field)


def parse_timestamp(value: str, field: str = "timestamp", entity: Optional[str] = None) -> datetime:
    """Parse a timestamp string in any of the tolerated ISO 8601 variants.

    Raises:
        ValidationError: If no supported format matches
    """
    text = _EXCESS_FRACTION.sub(r"\1", value.strip())
    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise ValidationError(f"unable to parse {field}: {value!r}", entity=entity, field=field)


def coerce_date(value: Optional[DateInput], field: str, entity: Optional[str] = None) -> date:
    """Normalize a boundary date input to a datetime.date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return parse_date(value, field=field, entity=entity)
    raise ValidationError(f"{field} is required and must be a date", entity=entity, field=field)


def coerce_optional_date(value: Optional[DateInput], field: str, entity: Optional[str] = None) -> Optional[date]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return coerce_date(value, field=field, entity=entity)


def format_date(value: Optional[date]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()

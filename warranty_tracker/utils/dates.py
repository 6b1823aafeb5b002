"""
Date helpers shared by the business and presentation layers.

All timestamps are stored as naive UTC, matching the database columns.
"""

from datetime import date, datetime, timezone
from typing import Optional, Union

from warranty_tracker.business.errors import ValidationError


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_today() -> date:
    return utc_now().date()


def as_naive_utc(value: Union[date, datetime]) -> datetime:
    """
    Normalize a date or datetime to a naive UTC datetime.

    A plain date becomes midnight of that day.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    return datetime(value.year, value.month, value.day)


def parse_date(value, field: str = 'date') -> Optional[date]:
    """
    Parse a form/JSON value into a date.

    Accepts ``date``/``datetime`` objects and ISO strings; the time part of
    an ISO datetime string is dropped. Blank values parse to None.

    Raises:
        ValidationError: the value is not a recognizable date
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        raise ValidationError(f"{field} must be an ISO date (YYYY-MM-DD)", field=field)

"""Date manipulation utilities"""

import calendar
from datetime import date, datetime, timezone
from typing import Optional, Union

from bnpl_tracker.domain.exceptions import InvalidDateError

DateLike = Union[date, datetime, str]


def to_date(value: DateLike) -> date:
    """Normalize a date, datetime or ISO-8601 string to a calendar date"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            pass
        try:
            # Accept JavaScript-style "Z" suffix
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError as e:
            raise InvalidDateError(f"Invalid date: {value!r}") from e
    raise InvalidDateError(f"Invalid date: {value!r}")


def add_months(from_date: date, months: int) -> date:
    """Shift a date by whole months, clamping the day to the target month's length"""
    month0 = from_date.month - 1 + months
    year = from_date.year + month0 // 12
    month = month0 % 12 + 1
    day = min(from_date.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def utc_now() -> datetime:
    """Naive UTC timestamp, as stored in the database"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_datetime(value: Union[datetime, str, None]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp into a naive UTC datetime; None if missing or unparseable"""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed

"""Date manipulation utilities

All timestamps are timezone-aware UTC. "Today" is the UTC calendar date.
"""

from datetime import date, datetime, timezone
from dateutil.relativedelta import relativedelta


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_today() -> date:
    return utc_now().date()


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (storage drivers may drop tzinfo)"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def months_between(start: date, end: date) -> int:
    """
    Whole calendar months from start to end, truncated.

    Jan 31 -> Mar 1 is 1 month. Negative when end precedes start.
    """
    delta = relativedelta(end, start)
    return delta.years * 12 + delta.months

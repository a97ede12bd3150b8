"""Date manipulation utilities"""

from datetime import date, datetime, timedelta


def as_date(value: date | datetime) -> date:
    """Normalize datetimes to their calendar date"""
    if isinstance(value, datetime):
        return value.date()
    return value


def days_between(start: date | datetime, end: date | datetime) -> int:
    """Whole calendar days from start to end (negative if end is earlier)"""
    return (as_date(end) - as_date(start)).days


def add_days(from_date: date | datetime, days: int) -> date:
    """Calendar date `days` after from_date"""
    return as_date(from_date) + timedelta(days=days)

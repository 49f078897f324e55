"""Date manipulation utilities"""

from datetime import date, datetime, time, timedelta
from typing import Optional, Union

ONE_DAY = timedelta(days=1)
END_OF_DAY = time(23, 59, 59)

DateLike = Union[date, datetime, str, None]
TimeLike = Union[time, str, None]


def parse_date(value: DateLike) -> Optional[datetime]:
    """Coerce a date, datetime or ISO string to a naive datetime (None if unusable)"""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    if isinstance(value, datetime):
        # Rental dates are local calendar values
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    return None


def parse_time(value: TimeLike) -> Optional[time]:
    """Coerce a time or "HH:MM[:SS]" string to a time (None if unusable)"""
    if value is None or value == "":
        return None
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        try:
            return time.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def end_of_day(day: datetime) -> datetime:
    """Last second of the calendar day (23:59:59)"""
    return datetime.combine(day.date(), END_OF_DAY)


def ceil_days(delta: timedelta) -> int:
    """Whole days in a non-negative timedelta, any fraction counting as a full day"""
    return -((-delta) // ONE_DAY)

# calendar_days.py
from __future__ import annotations
import calendar
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple, Union

DayLike = Union[date, datetime]


def start_of_day(value: DayLike) -> date:
    """strip the time-of-day part; local calendar"""
    if isinstance(value, datetime):
        return value.date()
    return value


def days_between(start: DayLike, end: DayLike) -> int:
    """whole calendar days from start to end (negative if end is earlier)"""
    return (start_of_day(end) - start_of_day(start)).days


def shift_days(day: DayLike, days: int) -> Optional[date]:
    """
    move a calendar day by `days`
    returns None when the result falls outside the representable range
    """
    try:
        return start_of_day(day) + timedelta(days=days)
    except OverflowError:
        return None


# ---------- weekly ----------
def week_bounds(anchor: DayLike) -> Tuple[date, date]:
    """
    for given day, return (sunday, saturday) of its week
    """
    day = start_of_day(anchor)
    offset = day.isoweekday() % 7  # Sun -> 0, Mon -> 1 ... Sat -> 6
    sunday = day - timedelta(days=offset)
    saturday = sunday + timedelta(days=6)
    return sunday, saturday


def week_dates(anchor: DayLike) -> List[date]:
    """the 7 days (Sunday -> Saturday) of the week containing anchor"""
    sunday, _ = week_bounds(anchor)
    return [sunday + timedelta(days=i) for i in range(7)]


# ---------- monthly ----------
def month_bounds(y: int, m: int) -> Tuple[date, date]:
    """first and last day of the given month"""
    _, last = calendar.monthrange(y, m)
    return date(y, m, 1), date(y, m, last)

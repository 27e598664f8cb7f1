# progress_stats.py
from __future__ import annotations
from datetime import date, timedelta
from typing import TYPE_CHECKING, Dict, Iterable, Optional, Tuple

import numpy as np

from calendar_days import month_bounds, week_bounds

if TYPE_CHECKING:
    from progress import LearningProgress


def _days_to_array(days: Iterable[date]) -> np.ndarray:
    """
    returns:
      np.array[datetime64[D]], sorted
    """
    arr = np.array(sorted(days), dtype="datetime64[D]")
    return arr


def count_on_or_after(days: Iterable[date], start: date) -> int:
    """number of days that are on or after start"""
    arr = _days_to_array(days)
    if arr.size == 0:
        return 0
    mask = arr >= np.datetime64(start, "D")
    return int(np.count_nonzero(mask))


def count_between(days: Iterable[date], start: date, end: date) -> int:
    """number of days within [start, end]"""
    arr = _days_to_array(days)
    if arr.size == 0:
        return 0
    mask = (arr >= np.datetime64(start, "D")) & (arr <= np.datetime64(end, "D"))
    return int(np.count_nonzero(mask))


def _summary(progress: "LearningProgress", start: date, end: date) -> Dict[str, int]:
    return {
        "learned": count_between(progress.logged_dates, start, end),
        "frozen": count_between(progress.frozen_dates, start, end),
    }


# ---------- weekly ----------
def weekly_summary(progress: "LearningProgress",
                   ref: Optional[date] = None) -> Tuple[Dict[str, int], str]:
    """
    within the (Sunday-Saturday) week of the given reference day
    count learned and frozen days
    return: counts: {"learned": n, "frozen": n}, label: 'YYYY-Wxx (Mon DD-Mon DD)'
    """
    if ref is None:
        ref = progress.today()
    sun, sat = week_bounds(ref)
    # Monday always sits inside the Sunday-Saturday range
    iso = (sun + timedelta(days=1)).isocalendar()
    label = f"{iso[0]}-W{iso[1]:02d} ({sun.strftime('%b %d')}-{sat.strftime('%b %d')})"
    return _summary(progress, sun, sat), label


# ---------- monthly ----------
def monthly_summary(progress: "LearningProgress",
                    y: int, m: int) -> Tuple[Dict[str, int], str]:
    """
    within the given month and year
    count learned and frozen days
    return: (counts: {"learned": n, "frozen": n}, label: 'YYYY-MM')
    """
    start, end = month_bounds(y, m)
    return _summary(progress, start, end), f"{y}-{m:02d}"

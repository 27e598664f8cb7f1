# clock.py
from __future__ import annotations
from datetime import datetime, timedelta
from typing import Optional


class SystemClock:
    """local wall-clock time"""

    def now(self) -> datetime:
        return datetime.now()


class SimulatedClock(SystemClock):
    """
    a clock whose "now" can be overridden for testing
    when no override is set, the base clock's time is used
    """
    def __init__(self,
                 simulated: Optional[datetime] = None,
                 base: Optional[SystemClock] = None):
        self._simulated = simulated # overridden "now", None -> real time
        self._base = base or SystemClock() # source of real time

    # ----- properties -----
    @property
    def simulated(self) -> Optional[datetime]:
        """return the override, or None when running on real time"""
        return self._simulated

    def now(self) -> datetime:
        if self._simulated is not None:
            return self._simulated
        return self._base.now()

    # ----- time travel -----
    def advance_to_next_day(self) -> None:
        """pretend one day has passed"""
        self._shift(1)

    def go_to_previous_day(self) -> None:
        """pretend we are one day earlier"""
        self._shift(-1)

    def reset_to_real_date(self) -> None:
        """drop the override and follow the base clock again"""
        self._simulated = None

    def _shift(self, days: int) -> None:
        current = self.now()
        try:
            self._simulated = current + timedelta(days=days)
        except OverflowError:
            # outside datetime's range: stay where we are
            self._simulated = current

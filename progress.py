# progress.py
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Callable, List, Optional, Set, Union

from calendar_days import DayLike, days_between, shift_days, start_of_day
from clock import SimulatedClock
from progress_stats import count_on_or_after

logger = logging.getLogger(__name__)


class GoalDuration(str, Enum):
    WEEK = "Week"
    MONTH = "Month"
    YEAR = "Year"

    @classmethod
    def parse(cls, value: object) -> Optional["GoalDuration"]:
        """'Week' or GoalDuration.WEEK -> GoalDuration.WEEK; anything else -> None"""
        try:
            return cls(value)
        except ValueError:
            return None


class DayMark(str, Enum):
    """calendar circle for a day"""
    FROZEN_TODAY = "frozen-today"
    FROZEN_PAST = "frozen-past"
    LEARNED_TODAY = "learned-today"
    LEARNED_PAST = "learned-past"
    NONE = "none"


class DayText(str, Enum):
    """tone of the day number drawn inside a calendar circle"""
    TODAY = "today"
    FROZEN = "frozen"
    LEARNED = "learned"
    DEFAULT = "default"


# freezes allowed per goal period
MAX_FREEZES = {
    GoalDuration.WEEK: 2,
    GoalDuration.MONTH: 8,
    GoalDuration.YEAR: 96,
}
DEFAULT_MAX_FREEZES = 2

# days that must pass before a goal period is over
GOAL_LENGTH_DAYS = {
    GoalDuration.WEEK: 7,
    GoalDuration.MONTH: 30,
    GoalDuration.YEAR: 365,
}

Duration = Union[GoalDuration, str]


def max_freezes(duration: Duration) -> int:
    parsed = GoalDuration.parse(duration)
    if parsed is None:
        return DEFAULT_MAX_FREEZES
    return MAX_FREEZES[parsed]


def goal_length_days(duration: Duration) -> Optional[int]:
    """length of the goal period in days, None for an unknown duration"""
    parsed = GoalDuration.parse(duration)
    if parsed is None:
        return None
    return GOAL_LENGTH_DAYS[parsed]


def _today_of(clock: SimulatedClock) -> date:
    return start_of_day(clock.now())


@dataclass
class LearningProgress:
    """
    Progress of one user on one learning goal.

    Days are stored as calendar days (datetime.date). "Today" is always
    derived from the injected clock, so a simulated clock moves every
    today-based rule at once.
    """
    logged_dates: Set[date] = field(default_factory=set)
    frozen_dates: Set[date] = field(default_factory=set)
    current_streak_count: int = 0
    frozen_days_count: int = 0

    learning_topic: str = ""
    goal_duration: Duration = GoalDuration.WEEK
    goal_start_date: Optional[date] = None

    clock: SimulatedClock = field(default_factory=SimulatedClock, repr=False, compare=False)
    _subscribers: List[Callable[[], None]] = field(default_factory=list, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.goal_start_date is None:
            self.goal_start_date = _today_of(self.clock)
        else:
            self.goal_start_date = start_of_day(self.goal_start_date)

    @classmethod
    def for_goal(cls, topic: str, duration: Duration,
                 clock: Optional[SimulatedClock] = None) -> "LearningProgress":
        """fresh progress for a goal that starts today"""
        clock = clock or SimulatedClock()
        return cls(learning_topic=topic,
                   goal_duration=GoalDuration.parse(duration) or duration,
                   goal_start_date=_today_of(clock),
                   clock=clock)

    # ---------- pub-sub ----------
    def subscribe(self, fn: Callable[[], None]) -> None:
        """Register a callback invoked after a mutator changed the state."""
        self._subscribers.append(fn)

    def _notify(self) -> None:
        for fn in list(self._subscribers):
            try:
                fn()
            except Exception:
                logger.exception("progress subscriber %r failed", fn)

    # ---------- time ----------
    def today(self) -> date:
        return _today_of(self.clock)

    @property
    def simulated_date(self) -> Optional[datetime]:
        return self.clock.simulated

    def advance_to_next_day(self) -> None:
        self.clock.advance_to_next_day()

    def go_to_previous_day(self) -> None:
        self.clock.go_to_previous_day()

    def reset_to_real_date(self) -> None:
        self.clock.reset_to_real_date()

    # ---------- goal ----------
    @property
    def max_freezes(self) -> int:
        return max_freezes(self.goal_duration)

    @property
    def has_freezes_remaining(self) -> bool:
        return self.frozen_days_count < self.max_freezes

    @property
    def freezes_remaining(self) -> int:
        return max(0, self.max_freezes - self.frozen_days_count)

    @property
    def days_since_goal_start(self) -> int:
        return days_between(self.goal_start_date, self.today())

    @property
    def is_goal_completed(self) -> bool:
        length = goal_length_days(self.goal_duration)
        if length is None:
            return False
        return self.days_since_goal_start >= length

    @property
    def days_until_goal_end(self) -> int:
        """days left in the goal period (0 once completed or unknown)"""
        length = goal_length_days(self.goal_duration)
        if length is None:
            return 0
        return max(0, length - self.days_since_goal_start)

    # ---------- queries ----------
    def is_date_logged(self, day: DayLike) -> bool:
        return start_of_day(day) in self.logged_dates

    def is_date_freezed(self, day: DayLike) -> bool:
        return start_of_day(day) in self.frozen_dates

    def is_today_logged(self) -> bool:
        return self.is_date_logged(self.today())

    def is_today_freezed(self) -> bool:
        return self.is_date_freezed(self.today())

    def _is_marked(self, day: date) -> bool:
        return day in self.logged_dates or day in self.frozen_dates

    def color_class_for(self, day: DayLike) -> DayMark:
        """circle style for a calendar day; frozen wins over learned"""
        normalized = start_of_day(day)
        today = self.today()

        if normalized in self.frozen_dates:
            return DayMark.FROZEN_TODAY if normalized == today else DayMark.FROZEN_PAST
        if normalized in self.logged_dates:
            return DayMark.LEARNED_TODAY if normalized == today else DayMark.LEARNED_PAST
        return DayMark.NONE

    def text_class_for(self, day: DayLike) -> DayText:
        """tone of the day number; today always stands out"""
        normalized = start_of_day(day)
        if normalized == self.today():
            return DayText.TODAY
        if normalized in self.frozen_dates:
            return DayText.FROZEN
        if normalized in self.logged_dates:
            return DayText.LEARNED
        return DayText.DEFAULT

    # ---------- user actions ----------
    def log_today(self) -> bool:
        """mark today as learned; returns False when today was already marked"""
        today = self.today()
        if self._is_marked(today):
            return False
        self.logged_dates.add(today)
        self._update_streak_count()
        self._notify()
        return True

    def freeze_today(self) -> bool:
        """spend one freeze on today; returns False when nothing changed"""
        if not self.has_freezes_remaining:
            return False
        today = self.today()
        if self._is_marked(today):
            return False
        self.frozen_dates.add(today)
        self._update_freeze_count()
        self._update_streak_count()
        self._notify()
        return True

    def refresh_counters(self) -> None:
        """re-derive both counters against the current "today" (e.g. after a time jump)"""
        self._update_freeze_count()
        self._update_streak_count()
        self._notify()

    # ---------- derived counters ----------
    def compute_streak(self) -> int:
        """
        walk backwards from today until a day is neither learned nor frozen
        only learned days count, frozen days keep the chain alive
        the walk never goes before the goal start
        """
        streak = 0
        cursor: Optional[date] = self.today()
        goal_start = start_of_day(self.goal_start_date)

        while cursor is not None and cursor >= goal_start:
            if not self._is_marked(cursor):
                break
            if cursor in self.logged_dates:
                streak += 1
            cursor = shift_days(cursor, -1)
        return streak

    def compute_frozen_days(self) -> int:
        """frozen days used within the current goal period"""
        return count_on_or_after(self.frozen_dates, start_of_day(self.goal_start_date))

    def _update_streak_count(self) -> None:
        self.current_streak_count = self.compute_streak()

    def _update_freeze_count(self) -> None:
        self.frozen_days_count = self.compute_frozen_days()

    def check_and_reset_streak(self) -> bool:
        """
        True when yesterday was missed (neither learned nor frozen) and the
        caller should react; never mutates the state
        """
        today = self.today()
        goal_start = start_of_day(self.goal_start_date)

        # grace period right after a goal (re)start
        if days_between(goal_start, today) <= 1:
            return False
        if self._is_marked(today):
            return False

        yesterday = shift_days(today, -1)
        if yesterday is None:
            return False
        if yesterday <= goal_start:
            return False
        return not self._is_marked(yesterday)

    # ---------- resets ----------
    def _zero_counters(self) -> None:
        self.current_streak_count = 0
        self.frozen_days_count = 0

    def reset_streak(self) -> None:
        """zero the counters, keep the calendar history"""
        self._zero_counters()
        self._notify()

    def reset_for_goal_update(self) -> None:
        """goal edited but not scrapped"""
        self.reset_streak()

    def reset_for_new_goal(self) -> None:
        """
        Drop today's mark so it can be chosen again under the new goal and
        zero the counters. Older history is kept. The caller sets the new
        goal_start_date afterwards.
        """
        today = self.today()
        self.logged_dates.discard(today)
        self.frozen_dates.discard(today)
        self._zero_counters()
        self._notify()

    def reset_streak_and_history(self) -> None:
        """clear every mark and counter; topic and duration stay"""
        self.logged_dates.clear()
        self.frozen_dates.clear()
        self._zero_counters()
        self._notify()

    def reset_goal_keep_history(self) -> None:
        """start a new goal period today; old marks stay visible"""
        self.goal_start_date = self.today()
        self._zero_counters()
        self._notify()

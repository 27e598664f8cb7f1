from __future__ import annotations
from datetime import date, datetime, timedelta

import pytest

from clock import SimulatedClock
from progress import GoalDuration, LearningProgress
from storage import MemoryStore

# a Monday; every scenario below counts days from here
DAY0 = date(2025, 10, 20)


def at(day: date, hour: int = 9, minute: int = 30) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute)


def plus(days: int) -> date:
    return DAY0 + timedelta(days=days)


@pytest.fixture
def clock():
    return SimulatedClock(at(DAY0))


@pytest.fixture
def progress(clock):
    return LearningProgress.for_goal("Swift", GoalDuration.WEEK, clock=clock)


@pytest.fixture
def store():
    return MemoryStore()

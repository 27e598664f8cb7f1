# persistence.py
from __future__ import annotations
import json
import logging
from dataclasses import dataclass, fields
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional

from calendar_days import start_of_day
from clock import SimulatedClock
from progress import GoalDuration, LearningProgress
from storage import KeyValueStore

logger = logging.getLogger(__name__)

SNAPSHOT_KEY = "progress.snapshot.v1"


class SnapshotError(ValueError):
    """stored blob cannot be turned into a snapshot"""


@dataclass
class ProgressSnapshot:
    """plain, serializable copy of LearningProgress"""
    logged_dates: List[date]
    frozen_dates: List[date]
    current_streak_count: int
    frozen_days_count: int
    learning_topic: str
    goal_duration: str
    goal_start_date: date


# snapshot attribute -> field name on disk
WIRE_NAMES = {
    "logged_dates": "loggedDates",
    "frozen_dates": "frozenDates",
    "current_streak_count": "currentStreakCount",
    "frozen_days_count": "frozenDaysCount",
    "learning_topic": "learningTopic",
    "goal_duration": "goalDuration",
    "goal_start_date": "goalStartDate",
}

DATE_LIST_FIELDS = ("logged_dates", "frozen_dates")
INT_FIELDS = ("current_streak_count", "frozen_days_count")
STR_FIELDS = ("learning_topic", "goal_duration")


# ---------- validation ----------
def is_valid(snapshot: ProgressSnapshot) -> bool:
    """a topic was entered and the duration is one we know"""
    has_topic = bool(snapshot.learning_topic.strip())
    has_duration = GoalDuration.parse(snapshot.goal_duration) is not None
    return has_topic and has_duration


# ---------- live <-> snapshot ----------
def snapshot_from(progress: LearningProgress) -> ProgressSnapshot:
    duration = progress.goal_duration
    return ProgressSnapshot(
        logged_dates=sorted(progress.logged_dates),
        frozen_dates=sorted(progress.frozen_dates),
        current_streak_count=progress.current_streak_count,
        frozen_days_count=progress.frozen_days_count,
        learning_topic=progress.learning_topic,
        goal_duration=duration.value if isinstance(duration, GoalDuration) else str(duration),
        goal_start_date=start_of_day(progress.goal_start_date),
    )


def progress_from(snapshot: ProgressSnapshot,
                  clock: Optional[SimulatedClock] = None) -> LearningProgress:
    return LearningProgress(
        logged_dates=set(snapshot.logged_dates),
        frozen_dates=set(snapshot.frozen_dates),
        current_streak_count=snapshot.current_streak_count,
        frozen_days_count=snapshot.frozen_days_count,
        learning_topic=snapshot.learning_topic,
        goal_duration=GoalDuration.parse(snapshot.goal_duration) or snapshot.goal_duration,
        goal_start_date=snapshot.goal_start_date,
        clock=clock or SimulatedClock(),
    )


# ---------- wire format ----------
def _encode_day(day: date) -> str:
    # local midnight with its UTC offset, e.g. 2025-10-21T00:00:00+03:00
    try:
        return datetime.combine(day, time.min).astimezone().isoformat()
    except (OverflowError, OSError, ValueError) as e:
        # days at the edge of the calendar have no local offset
        raise SnapshotError(f"cannot timestamp {day!r}") from e


def _decode_day(text: Any) -> date:
    if not isinstance(text, str):
        raise SnapshotError(f"expected a timestamp string, got {text!r}")
    raw = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        moment = datetime.fromisoformat(raw)
    except ValueError as e:
        raise SnapshotError(f"bad timestamp {text!r}") from e
    if moment.tzinfo is not None:
        try:
            moment = moment.astimezone()
        except (OverflowError, OSError, ValueError) as e:
            raise SnapshotError(f"timestamp out of range {text!r}") from e
    return moment.date()


def encode(snapshot: ProgressSnapshot) -> str:
    payload: Dict[str, Any] = {}
    for f in fields(ProgressSnapshot):
        value = getattr(snapshot, f.name)
        if f.name in DATE_LIST_FIELDS:
            value = [_encode_day(d) for d in value]
        elif f.name == "goal_start_date":
            value = _encode_day(value)
        payload[WIRE_NAMES[f.name]] = value
    return json.dumps(payload, ensure_ascii=False, indent=2)


def decode(text: str) -> ProgressSnapshot:
    """
    parse a stored blob
    raises SnapshotError on bad JSON, missing/unknown fields or wrong types
    """
    try:
        data = json.loads(text)
    except ValueError as e:
        raise SnapshotError("snapshot is not valid JSON") from e
    if not isinstance(data, dict):
        raise SnapshotError("snapshot is not an object")

    expected = set(WIRE_NAMES.values())
    missing = expected - data.keys()
    unknown = data.keys() - expected
    if missing or unknown:
        raise SnapshotError(f"snapshot fields mismatch: missing={sorted(missing)} unknown={sorted(unknown)}")

    values: Dict[str, Any] = {}
    for name, wire in WIRE_NAMES.items():
        raw = data[wire]
        if name in DATE_LIST_FIELDS:
            if not isinstance(raw, list):
                raise SnapshotError(f"{wire} must be a list")
            values[name] = [_decode_day(item) for item in raw]
        elif name in INT_FIELDS:
            # bool is an int subclass, keep it out
            if not isinstance(raw, int) or isinstance(raw, bool) or raw < 0:
                raise SnapshotError(f"{wire} must be a non-negative integer")
            values[name] = raw
        elif name in STR_FIELDS:
            if not isinstance(raw, str):
                raise SnapshotError(f"{wire} must be a string")
            values[name] = raw
        else:
            values[name] = _decode_day(raw)
    return ProgressSnapshot(**values)


class PersistenceGateway:
    """
    saves / loads LearningProgress under a fixed, versioned key
    invalid data is never written and never handed back
    """
    def __init__(self, store: KeyValueStore, key: str = SNAPSHOT_KEY):
        self.store = store
        self.key = key

    def save(self, progress: LearningProgress) -> None:
        snap = snapshot_from(progress)
        # nothing worth saving before onboarding is done
        if not is_valid(snap):
            logger.info("skip saving progress: topic=%r duration=%r",
                        snap.learning_topic, snap.goal_duration)
            return
        try:
            text = encode(snap)
        except SnapshotError:
            logger.warning("skip saving progress: a day cannot be stored", exc_info=True)
            return
        self.store.set(self.key, text)
        logger.debug("saved progress under %s", self.key)

    def load(self, clock: Optional[SimulatedClock] = None) -> Optional[LearningProgress]:
        text = self.store.get(self.key)
        if text is None:
            return None
        try:
            snap = decode(text)
        except SnapshotError:
            logger.warning("stored progress under %s is unreadable", self.key, exc_info=True)
            return None
        if not is_valid(snap):
            logger.warning("stored progress under %s failed validation", self.key)
            return None
        logger.debug("loaded progress from %s", self.key)
        return progress_from(snap, clock)

    def clear(self) -> None:
        self.store.remove(self.key)

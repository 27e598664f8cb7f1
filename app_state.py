# app_state.py
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from clock import SimulatedClock
from persistence import SNAPSHOT_KEY, PersistenceGateway
from progress import Duration, GoalDuration, LearningProgress
from storage import JsonFileStore, KeyValueStore, ensure_data_files, load_config

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "storage_key": SNAPSHOT_KEY,
}


def _clean_goal(topic: str, duration: Duration) -> Optional[tuple]:
    """(trimmed topic, GoalDuration) or None when the input is unusable"""
    cleaned = (topic or "").strip()
    parsed = GoalDuration.parse(duration)
    if not cleaned or parsed is None:
        logger.warning("rejected goal: topic=%r duration=%r", topic, duration)
        return None
    return cleaned, parsed


@dataclass
class AppState:
    """
    Glue between a UI and the progress model.

    Every user action updates the model, saves it right away and then
    notifies subscribers so views can redraw.
    """
    gateway: PersistenceGateway
    progress: Optional[LearningProgress] = None
    clock: SimulatedClock = field(default_factory=SimulatedClock)

    _subscribers: List[Callable[[], None]] = field(default_factory=list, repr=False)

    @classmethod
    def boot(cls, store: Optional[KeyValueStore] = None,
             clock: Optional[SimulatedClock] = None) -> "AppState":
        """
        read config, then restore saved progress if any
        progress stays None when onboarding is still needed
        """
        if store is None:
            store = JsonFileStore()
            ensure_data_files(DEFAULT_CONFIG)
            config = load_config(DEFAULT_CONFIG)
        else:
            config = dict(DEFAULT_CONFIG)
        clock = clock or SimulatedClock()
        gateway = PersistenceGateway(store, key=config["storage_key"])
        return cls(gateway=gateway, progress=gateway.load(clock), clock=clock)

    # ---------- pub-sub ----------
    def subscribe(self, fn: Callable[[], None]) -> None:
        """Register a callback to be invoked whenever progress changes."""
        self._subscribers.append(fn)

    def _notify(self) -> None:
        for fn in list(self._subscribers):
            try:
                fn()
            except Exception:
                logger.exception("app subscriber %r failed", fn)

    def _commit(self) -> None:
        self.save()
        self._notify()

    # ---------- persistence helpers ----------
    def save(self) -> None:
        if self.progress is not None:
            self.gateway.save(self.progress)

    def on_background(self) -> None:
        """app is leaving the foreground: persist whatever we have"""
        self.save()

    @property
    def needs_onboarding(self) -> bool:
        return self.progress is None

    # ---------- goal ----------
    def start_goal(self, topic: str, duration: Duration) -> bool:
        """onboarding: a brand new goal starting today"""
        goal = _clean_goal(topic, duration)
        if goal is None:
            return False
        self.progress = LearningProgress.for_goal(goal[0], goal[1], clock=self.clock)
        self._commit()
        return True

    def update_goal(self, topic: str, duration: Duration, updating_midway: bool) -> bool:
        """
        change topic/duration; the goal restarts today
        midway updates also drop today's mark so it can be chosen again
        """
        if self.progress is None:
            return self.start_goal(topic, duration)
        goal = _clean_goal(topic, duration)
        if goal is None:
            return False

        p = self.progress
        p.learning_topic, p.goal_duration = goal
        if updating_midway:
            p.reset_for_new_goal()
        else:
            p.reset_streak()
        p.goal_start_date = p.today()
        self._commit()
        return True

    def reset_goal_keep_history(self) -> None:
        """same goal and duration again, history stays on the calendar"""
        if self.progress is None:
            return
        self.progress.reset_goal_keep_history()
        self._commit()

    def clear_history(self) -> None:
        if self.progress is None:
            return
        self.progress.reset_streak_and_history()
        self._commit()

    # ---------- daily actions ----------
    def log_today(self) -> bool:
        if self.progress is None:
            return False
        changed = self.progress.log_today()
        self._commit()
        return changed

    def freeze_today(self) -> bool:
        if self.progress is None:
            return False
        changed = self.progress.freeze_today()
        self._commit()
        return changed

    def check_streak(self) -> bool:
        """True when yesterday was missed and the UI should offer a reset"""
        if self.progress is None:
            return False
        return self.progress.check_and_reset_streak()

    # ---------- read-only views ----------
    @property
    def learning_topic(self) -> str:
        return self.progress.learning_topic if self.progress else ""

    @property
    def goal_duration(self) -> Optional[Duration]:
        return self.progress.goal_duration if self.progress else None

    @property
    def is_goal_completed(self) -> bool:
        return bool(self.progress and self.progress.is_goal_completed)

    @property
    def current_streak_count(self) -> int:
        return self.progress.current_streak_count if self.progress else 0

    @property
    def frozen_days_count(self) -> int:
        return self.progress.frozen_days_count if self.progress else 0

    @property
    def freezes_remaining(self) -> int:
        return self.progress.freezes_remaining if self.progress else 0

    @property
    def has_freezes_remaining(self) -> bool:
        return bool(self.progress and self.progress.has_freezes_remaining)

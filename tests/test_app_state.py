from __future__ import annotations

import storage
from app_state import AppState
from conftest import DAY0, plus
from persistence import SNAPSHOT_KEY, PersistenceGateway
from progress import GoalDuration


def test_boot_without_saved_state_needs_onboarding(store, clock):
    app = AppState.boot(store, clock)
    assert app.needs_onboarding
    assert app.log_today() is False
    assert app.check_streak() is False
    assert app.learning_topic == ""
    assert app.freezes_remaining == 0


def test_start_goal_saves_immediately(store, clock):
    app = AppState.boot(store, clock)
    assert app.start_goal("  Python ", "Month") is True
    assert app.learning_topic == "Python"
    assert app.goal_duration == GoalDuration.MONTH
    assert app.progress.goal_start_date == DAY0
    assert store.get(SNAPSHOT_KEY) is not None


def test_start_goal_rejects_bad_input(store, clock, caplog):
    app = AppState.boot(store, clock)
    assert app.start_goal("   ", "Week") is False
    assert app.start_goal("Python", "Fortnight") is False
    assert app.needs_onboarding
    assert store.get(SNAPSHOT_KEY) is None
    assert "rejected goal" in caplog.text


def test_actions_save_and_notify(store, clock):
    app = AppState.boot(store, clock)
    app.start_goal("Python", "Week")
    seen = []
    app.subscribe(lambda: seen.append(app.current_streak_count))

    assert app.log_today() is True
    clock.advance_to_next_day()
    assert app.freeze_today() is True
    assert seen == [1, 1]

    restored = AppState.boot(store, clock)
    assert restored.progress.logged_dates == {DAY0}
    assert restored.progress.frozen_dates == {plus(1)}
    assert restored.frozen_days_count == 1
    assert restored.has_freezes_remaining is True


def test_update_goal_midway_frees_today(store, clock):
    app = AppState.boot(store, clock)
    app.start_goal("Python", "Week")
    app.log_today()
    clock.advance_to_next_day()
    app.log_today()

    assert app.update_goal("Rust", "Year", updating_midway=True) is True
    p = app.progress
    assert p.learning_topic == "Rust"
    assert p.goal_duration == GoalDuration.YEAR
    assert p.goal_start_date == plus(1)
    assert p.logged_dates == {DAY0}
    assert app.current_streak_count == 0
    assert app.log_today() is True


def test_update_goal_after_completion_keeps_today(store, clock):
    app = AppState.boot(store, clock)
    app.start_goal("Python", "Week")
    for _ in range(7):
        app.log_today()
        clock.advance_to_next_day()
    app.log_today()
    assert app.is_goal_completed

    app.update_goal("Python", "Week", updating_midway=False)
    assert app.progress.goal_start_date == plus(7)
    assert app.progress.is_today_logged()
    assert app.current_streak_count == 0
    assert not app.is_goal_completed


def test_update_goal_rejects_bad_input(store, clock):
    app = AppState.boot(store, clock)
    app.start_goal("Python", "Week")
    app.log_today()
    assert app.update_goal("", "Week", updating_midway=True) is False
    assert app.learning_topic == "Python"
    assert app.progress.is_today_logged()


def test_update_goal_without_progress_starts_one(store, clock):
    app = AppState.boot(store, clock)
    assert app.update_goal("Go", "Week", updating_midway=False) is True
    assert not app.needs_onboarding


def test_reset_goal_keep_history(store, clock):
    app = AppState.boot(store, clock)
    app.start_goal("Python", "Week")
    app.log_today()
    clock.advance_to_next_day()
    clock.advance_to_next_day()
    app.reset_goal_keep_history()

    restored = AppState.boot(store, clock)
    assert restored.progress.goal_start_date == plus(2)
    assert restored.progress.logged_dates == {DAY0}


def test_clear_history(store, clock):
    app = AppState.boot(store, clock)
    app.start_goal("Python", "Week")
    app.log_today()
    app.clear_history()
    assert app.progress.logged_dates == set()
    assert AppState.boot(store, clock).progress.logged_dates == set()


def test_check_streak_after_missed_day(store, clock):
    app = AppState.boot(store, clock)
    app.start_goal("Python", "Week")
    app.log_today()
    for _ in range(3):
        clock.advance_to_next_day()
    assert app.check_streak() is True


def test_on_background_saves(store, clock):
    app = AppState.boot(store, clock)
    app.on_background()
    assert store.get(SNAPSHOT_KEY) is None

    app.start_goal("Python", "Week")
    app.progress.log_today()  # bypasses the controller
    app.on_background()
    loaded = PersistenceGateway(store).load(clock)
    assert loaded.is_today_logged()


def test_boot_uses_data_dir_and_config(tmp_path, monkeypatch, clock):
    monkeypatch.setattr(storage, "DATA_DIR", tmp_path)
    monkeypatch.setattr(storage, "CONFIG_PATH", tmp_path / "config.json")

    app = AppState.boot(clock=clock)
    assert (tmp_path / "config.json").exists()
    app.start_goal("Python", "Week")
    assert (tmp_path / f"{SNAPSHOT_KEY}.json").exists()

    assert not AppState.boot(clock=clock).needs_onboarding

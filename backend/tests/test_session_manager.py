"""Tests for session bookkeeping.

Covers:
  - Session cap
  - Idle session eviction and activity tracking
  - Calibration persisted when an idle session is evicted
"""

import pytest

from physiofix.config import Settings
from physiofix.cv.calibration import CalibrationRecord
from physiofix.session_manager import SessionLimitError, SessionManager
from physiofix.storage import InMemoryCalibrationStore


def _manager(now, max_sessions: int = 2, ttl: float = 60.0, store=None) -> SessionManager:
    return SessionManager(
        settings=Settings(max_sessions=max_sessions, session_ttl_seconds=ttl),
        store=store if store is not None else InMemoryCalibrationStore(),
        clock=lambda: now[0]
    )


def test_session_cap_applies_to_active_sessions():
    now = [0.0]
    manager = _manager(now)
    manager.create_session("squat")
    manager.create_session("squat")

    now[0] = 30.0
    with pytest.raises(SessionLimitError):
        manager.create_session("squat")


def test_abandoned_sessions_free_their_slots():
    now = [0.0]
    manager = _manager(now)
    first = manager.create_session("squat")
    second = manager.create_session("lunge")

    now[0] = 61.0
    third = manager.create_session("squat")

    assert manager.get_session(first) is None
    assert manager.get_session(second) is None
    assert set(manager.active_sessions) == {third}
    assert set(manager.last_activity) == {third}


def test_lookup_keeps_session_alive():
    now = [0.0]
    manager = _manager(now)
    kept = manager.create_session("squat")
    idle = manager.create_session("squat")

    now[0] = 50.0
    assert manager.get_session(kept) is not None

    now[0] = 100.0
    assert manager.evict_idle_sessions() == 1
    assert manager.get_session(kept) is not None
    assert idle not in manager.active_sessions


def test_evicted_session_persists_calibration():
    now = [0.0]
    store = InMemoryCalibrationStore()
    manager = _manager(now, store=store)
    session_id = manager.create_session("lunge")
    record = CalibrationRecord(resting_angle=168, peak_angle=95, rom=73)
    manager.get_session(session_id).calibration.set_data(record)

    now[0] = 120.0
    manager.evict_idle_sessions()

    assert store.load("lunge") == record


def test_end_unknown_session():
    manager = _manager([0.0])

    assert manager.end_session("missing") is None

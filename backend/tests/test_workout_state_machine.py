"""Tests for the rep counting state machine.

Covers:
  - One full rep in min and max mode
  - Aborted reps
  - Re-descent from ascent
  - Debounce window and timestamp rewinds
  - Missing config and reset
"""

from physiofix.cv.exercises.overhead_press import COUNTING_CONFIG as PRESS_CONFIG
from physiofix.cv.exercises.squat import COUNTING_CONFIG as SQUAT_CONFIG
from physiofix.cv.workout_state_machine import REP_COMPLETE, WorkoutPhase, WorkoutStateMachine


def _feed(machine: WorkoutStateMachine, angles, config=SQUAT_CONFIG, start: float = 0.0, step: float = 1.0):
    """Feed angles one second apart (well outside the debounce window)."""
    return [
        machine.update(angle, config, now=start + i * step)
        for i, angle in enumerate(angles)
    ]


def test_full_squat_rep():
    machine = WorkoutStateMachine()

    signals = _feed(machine, [160, 150, 100, 80, 95, 120, 150, 162])

    assert signals == [
        "START", "START", "DESCENDING", "PEAK", "PEAK", "ASCENDING", "ASCENDING", REP_COMPLETE
    ]
    assert machine.rep_count == 1
    assert machine.current_state == WorkoutPhase.START


def test_consecutive_reps():
    machine = WorkoutStateMachine()

    signals = _feed(machine, [160, 120, 80, 120, 160] * 3)

    assert signals.count(REP_COMPLETE) == 3
    assert machine.rep_count == 3


def test_abort_without_peak():
    machine = WorkoutStateMachine()

    _feed(machine, [160, 130, 155])

    assert machine.current_state == WorkoutPhase.START
    assert machine.rep_count == 0


def test_shallow_dip_never_descends():
    machine = WorkoutStateMachine()

    signals = _feed(machine, [160, 150, 158])

    assert signals == ["START", "START", "START"]
    assert machine.rep_count == 0


def test_redescend_returns_to_peak():
    machine = WorkoutStateMachine()

    _feed(machine, [130, 80, 110, 95])

    assert machine.current_state == WorkoutPhase.PEAK
    assert machine.rep_count == 0


def test_max_mode_rep():
    machine = WorkoutStateMachine()

    signals = _feed(machine, [70, 90, 165, 140, 75], config=PRESS_CONFIG)

    assert signals == ["START", "DESCENDING", "PEAK", "ASCENDING", REP_COMPLETE]
    assert machine.rep_count == 1


def test_max_mode_abort():
    machine = WorkoutStateMachine()

    _feed(machine, [70, 90, 75], config=PRESS_CONFIG)

    assert machine.current_state == WorkoutPhase.START
    assert machine.rep_count == 0


def test_debounce_suppresses_fast_transitions():
    machine = WorkoutStateMachine()

    assert machine.update(130, SQUAT_CONFIG, now=10.0) == "DESCENDING"
    assert machine.update(80, SQUAT_CONFIG, now=10.1) == "DESCENDING"
    assert machine.update(80, SQUAT_CONFIG, now=10.3) == "PEAK"


def test_debounce_uses_injected_clock():
    now = [0.0]
    machine = WorkoutStateMachine(clock=lambda: now[0])

    machine.update(130, SQUAT_CONFIG)
    now[0] = 0.05
    assert machine.update(80, SQUAT_CONFIG) == "DESCENDING"
    now[0] = 0.5
    assert machine.update(80, SQUAT_CONFIG) == "PEAK"


def test_timestamp_rewind_starts_new_time_origin():
    machine = WorkoutStateMachine()
    machine.update(130, SQUAT_CONFIG, now=500.0)

    assert machine.update(80, SQUAT_CONFIG, now=1.0) == "PEAK"
    assert machine.last_state_change == 1.0
    assert machine.update(120, SQUAT_CONFIG, now=1.1) == "PEAK"


def test_first_update_is_not_debounced():
    machine = WorkoutStateMachine(clock=lambda: 0.0)

    assert machine.update(130, SQUAT_CONFIG) == "DESCENDING"


def test_missing_config_is_noop():
    machine = WorkoutStateMachine()

    assert machine.update(80, None, now=1.0) == "START"
    assert machine.current_state == WorkoutPhase.START
    assert machine.last_state_change is None


def test_reset():
    machine = WorkoutStateMachine()
    _feed(machine, [160, 120, 80, 120, 160, 120])

    machine.reset()

    assert machine.rep_count == 0
    assert machine.current_state == WorkoutPhase.START

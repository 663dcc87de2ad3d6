"""Tests for the calibration service.

Covers:
  - Static phase: resting angle is the mean of 30 samples
  - ROM phase: peak is the extreme furthest from rest
  - Indeterminate angles are ignored
  - set_data / reset
  - Peak threshold relaxation for min and max modes
"""

import pytest

from physiofix.cv.calibration import (
    CalibrationRecord,
    CalibrationService,
    CalibrationState,
)
from physiofix.cv.exercises.base import AnalysisResult
from physiofix.cv.exercises.overhead_press import COUNTING_CONFIG as PRESS_CONFIG
from physiofix.cv.exercises.squat import COUNTING_CONFIG as SQUAT_CONFIG


def _analysis(angle: float) -> AnalysisResult:
    return AnalysisResult(angle=angle, feedback="", state="")


def _run_static(service: CalibrationService, angle: float):
    for _ in range(CalibrationService.STATIC_SAMPLES):
        service.update(_analysis(angle))


# ============================================================================
# Calibration run
# ============================================================================

def test_starts_idle():
    service = CalibrationService()

    assert service.state == CalibrationState.IDLE
    assert not service.is_calibrating
    assert not service.is_complete


def test_start_enters_static_phase():
    service = CalibrationService()
    message = service.start()

    assert service.state == CalibrationState.STATIC_CALIBRATION
    assert service.is_calibrating
    assert message == "Stand still for calibration..."


def test_static_phase_reports_progress_then_transitions_on_last_sample():
    service = CalibrationService()
    service.start()

    for _ in range(CalibrationService.STATIC_SAMPLES - 1):
        progress = service.update(_analysis(175))
    assert progress.state == CalibrationState.STATIC_CALIBRATION
    assert progress.progress == pytest.approx(29 / 30 * 100)

    progress = service.update(_analysis(175))
    assert progress.state == CalibrationState.ROM_CALIBRATION
    assert progress.message == "Great! Now perform ONE full rep."
    assert service.get_data().resting_angle == pytest.approx(175.0)


def test_resting_angle_is_sample_mean():
    service = CalibrationService()
    service.start()

    for i in range(CalibrationService.STATIC_SAMPLES):
        service.update(_analysis(170 if i % 2 else 180))

    assert service.get_data().resting_angle == pytest.approx(175.0)


def test_full_run_learns_peak_and_rom():
    service = CalibrationService()
    service.start()
    _run_static(service, 175)

    samples = [170] * 149 + [90]
    for angle in samples:
        progress = service.update(_analysis(angle))

    assert progress.state == CalibrationState.COMPLETE
    assert progress.progress == 100
    assert progress.message == "Calibration Complete!"
    assert service.is_complete

    record = service.get_data()
    assert record.resting_angle == pytest.approx(175.0)
    assert record.peak_angle == pytest.approx(90.0)
    assert record.rom == pytest.approx(85.0)


def test_peak_can_be_above_rest():
    service = CalibrationService()
    service.start()
    _run_static(service, 70)

    for angle in [75] * 100 + [165] * 50:
        service.update(_analysis(angle))

    assert service.get_data().peak_angle == pytest.approx(165.0)
    assert service.get_data().rom == pytest.approx(95.0)


def test_equal_deviation_prefers_max():
    service = CalibrationService()
    service.start()
    _run_static(service, 100)

    for angle in [50] * 75 + [150] * 75:
        service.update(_analysis(angle))

    assert service.get_data().peak_angle == pytest.approx(150.0)


def test_indeterminate_angle_is_ignored():
    service = CalibrationService()
    service.start()

    progress = service.update(_analysis(0))
    assert progress.progress == 0

    progress = service.update(None)
    assert progress.progress == 0

    _run_static(service, 175)
    assert service.state == CalibrationState.ROM_CALIBRATION


def test_update_after_complete_is_stable():
    service = CalibrationService()
    service.set_data(CalibrationRecord(resting_angle=170, peak_angle=100, rom=70))

    progress = service.update(_analysis(120))

    assert progress.state == CalibrationState.COMPLETE
    assert service.get_data().peak_angle == 100


# ============================================================================
# set_data / reset
# ============================================================================

def test_set_data_marks_complete_and_copies():
    service = CalibrationService()
    record = CalibrationRecord(resting_angle=172, peak_angle=105, rom=67)

    service.set_data(record)
    record.peak_angle = 10

    assert service.is_complete
    assert service.get_data().peak_angle == 105


def test_set_data_none_is_ignored():
    service = CalibrationService()
    service.set_data(None)

    assert service.state == CalibrationState.IDLE


def test_reset_returns_to_idle():
    service = CalibrationService()
    service.start()
    service.update(_analysis(175))

    service.reset()

    assert service.state == CalibrationState.IDLE
    service.start()
    _run_static(service, 160)
    assert service.get_data().resting_angle == pytest.approx(160.0)


def test_record_persisted_form():
    record = CalibrationRecord(resting_angle=175.0, peak_angle=95.0, rom=80.0)
    data = record.to_dict()

    assert data == {"restingAngle": 175.0, "peakAngle": 95.0, "rom": 80.0}
    assert CalibrationRecord.from_dict(data) == record
    assert CalibrationRecord.from_dict({}) == CalibrationRecord()


# ============================================================================
# Threshold relaxation
# ============================================================================

def test_shallow_peak_relaxes_min_threshold():
    service = CalibrationService()
    service.set_data(CalibrationRecord(resting_angle=170, peak_angle=100, rom=70))

    config = service.apply_to_config(SQUAT_CONFIG)

    assert config.peak_threshold == pytest.approx(105.0)
    assert config.start_angle == SQUAT_CONFIG.start_angle
    assert SQUAT_CONFIG.peak_threshold == 90


def test_deep_peak_never_tightens():
    service = CalibrationService()
    service.set_data(CalibrationRecord(resting_angle=170, peak_angle=70, rom=100))

    assert service.apply_to_config(SQUAT_CONFIG) is SQUAT_CONFIG


def test_short_peak_relaxes_max_threshold():
    service = CalibrationService()
    service.set_data(CalibrationRecord(resting_angle=60, peak_angle=150, rom=90))

    config = service.apply_to_config(PRESS_CONFIG)

    assert config.peak_threshold == pytest.approx(145.0)


def test_no_relaxation_until_complete():
    service = CalibrationService()

    assert service.apply_to_config(SQUAT_CONFIG) is SQUAT_CONFIG
    assert service.apply_to_config(None) is None

"""Tests for exercise definitions, the registry and the auto classifier.

Covers:
  - Squat depth states, valgus and back-lean feedback
  - Overhead press, bicep curl and lunge feedback
  - Indeterminate result on missing landmarks
  - Registry lookup and unknown ids
  - Classifier decision rules and missing-joint error
"""

import pytest

from physiofix.cv.exercise_classifier import (
    ClassificationError,
    ExerciseClassifier,
    classify_exercise,
)
from physiofix.cv.exercises import (
    EXERCISES,
    CountingMode,
    ExerciseId,
    analyze_exercise,
    get_exercise,
)
from physiofix.cv.exercises.bicep_curl import BICEP_CURL
from physiofix.cv.exercises.lunge import LUNGE
from physiofix.cv.exercises.overhead_press import OVERHEAD_PRESS
from physiofix.cv.exercises.squat import SQUAT
from physiofix.cv.pose import PoseLandmark

from tests.pose_factory import curl_pose, make_pose, squat_pose


# ============================================================================
# Squat
# ============================================================================

def test_squat_standing():
    result = SQUAT.analyze(squat_pose(175))

    assert result.angle == 175
    assert result.state == "standing"
    assert result.feedback == "Ready"


@pytest.mark.parametrize("knee_angle, state, feedback", [
    (130, "descending", "Go Lower"),
    (100, "squat_depth", "Perfect Depth"),
    (80, "deep_squat", "Good Form"),
])
def test_squat_depth_states(knee_angle, state, feedback):
    result = SQUAT.analyze(squat_pose(knee_angle))

    assert result.angle == knee_angle
    assert result.state == state
    assert result.feedback == feedback
    assert result.metrics == {"valgus": False, "leaning": False}


def test_squat_valgus_has_priority():
    result = SQUAT.analyze(squat_pose(120, knee_spread=0.02, ankle_spread=0.2, lean=60))

    assert result.metrics["valgus"] is True
    assert result.feedback == "Push Knees Out!"
    assert result.visuals["color"] == "#f97316"


def test_squat_back_lean():
    result = SQUAT.analyze(squat_pose(130, lean=60))

    assert result.metrics["leaning"] is True
    assert result.feedback == "Keep Chest Up!"


def test_squat_visuals_focus_on_knee():
    result = SQUAT.analyze(squat_pose(100))

    assert result.visuals["focus_point"] == 25
    assert result.visuals["color"] == "#22c55e"


def test_squat_missing_landmark_is_indeterminate():
    result = SQUAT.analyze(make_pose({PoseLandmark.LEFT_ANKLE: None}))

    assert result.angle == 0
    assert result.is_indeterminate
    assert result.feedback == "Waiting..."
    assert result.state == "idle"


# ============================================================================
# Overhead press / bicep curl / lunge
# ============================================================================

def test_overhead_press_lockout():
    pose = make_pose({
        PoseLandmark.LEFT_ELBOW: (0.45, 0.15),
        PoseLandmark.LEFT_WRIST: (0.45, 0.0),
    })
    result = OVERHEAD_PRESS.analyze(pose)

    assert result.angle == 180
    assert result.state == "extension_peak"
    assert result.feedback == "Hold Top"
    assert result.metrics["shoulder_angle"] == 180


def test_overhead_press_rack_position():
    pose = make_pose({PoseLandmark.LEFT_WRIST: (0.5, 0.35)})
    result = OVERHEAD_PRESS.analyze(pose)

    assert result.angle < 70
    assert result.state == "start_position"
    assert result.feedback == "Press Up"


def test_overhead_press_counts_upward():
    assert OVERHEAD_PRESS.counting_config.mode == CountingMode.MAX


@pytest.mark.parametrize("elbow_angle, state, feedback", [
    (175, "extension", "Curl Up"),
    (100, "moving", "Control It"),
    (45, "flexion", "Squeeze"),
])
def test_bicep_curl_states(elbow_angle, state, feedback):
    result = BICEP_CURL.analyze(curl_pose(elbow_angle))

    assert result.angle == elbow_angle
    assert result.state == state
    assert result.feedback == feedback


@pytest.mark.parametrize("knee_angle, state, feedback", [
    (175, "standing", "Step Forward"),
    (120, "descending", "Drop Back Knee"),
    (90, "lunge_depth", "Good Depth"),
    (60, "lunge_depth", "Knee over toe!"),
])
def test_lunge_states(knee_angle, state, feedback):
    result = LUNGE.analyze(squat_pose(knee_angle))

    assert result.angle == knee_angle
    assert result.state == state
    assert result.feedback == feedback


# ============================================================================
# Registry
# ============================================================================

def test_registry_covers_every_exercise_id():
    assert set(EXERCISES) == set(ExerciseId)
    for exercise_id, definition in EXERCISES.items():
        assert definition.id == exercise_id.value
        assert definition.type == "reps"


def test_get_exercise():
    assert get_exercise("squat") is SQUAT
    assert get_exercise(ExerciseId.LUNGE) is LUNGE
    assert get_exercise("standing") is None
    assert get_exercise(None) is None


def test_analyze_unknown_exercise():
    result = analyze_exercise(make_pose(), "jumping_jack")

    assert result.angle == 0
    assert result.feedback == "Unknown Exercise"
    assert result.pose_coords["left_hip"] is not None


def test_analyze_attaches_named_coords():
    pose = squat_pose(120)
    result = analyze_exercise(pose, "squat")

    assert result.pose_coords["left_knee"] == pose[PoseLandmark.LEFT_KNEE]
    assert len(result.pose_coords) == 33


# ============================================================================
# Classifier
# ============================================================================

def test_classify_standing():
    assert classify_exercise(make_pose()) == "standing"
    assert classify_exercise(None) == "standing"


def test_classify_squat():
    pose = make_pose({
        PoseLandmark.LEFT_HIP: (0.45, 0.75),
        PoseLandmark.RIGHT_HIP: (0.55, 0.75),
    })
    assert classify_exercise(pose) == "squat"


def test_classify_overhead_reach_vs_press():
    reach = make_pose({
        PoseLandmark.LEFT_WRIST: (0.48, 0.1),
        PoseLandmark.RIGHT_WRIST: (0.52, 0.1),
    })
    press = make_pose({
        PoseLandmark.LEFT_WRIST: (0.3, 0.1),
        PoseLandmark.RIGHT_WRIST: (0.7, 0.1),
    })

    assert classify_exercise(reach) == "overhead_reach"
    assert classify_exercise(press) == "overhead_press"


def test_classify_lateral_raise():
    pose = make_pose({
        PoseLandmark.LEFT_WRIST: (0.1, 0.3),
        PoseLandmark.RIGHT_WRIST: (0.9, 0.3),
    })
    assert classify_exercise(pose) == "lateral_raise"


def test_classify_bicep_curl():
    pose = make_pose({
        PoseLandmark.LEFT_WRIST: (0.45, 0.35),
        PoseLandmark.RIGHT_WRIST: (0.55, 0.35),
    })
    assert classify_exercise(pose) == "bicep_curl"


def test_classify_lunge():
    pose = make_pose({
        PoseLandmark.LEFT_KNEE: (0.45, 0.9),
        PoseLandmark.RIGHT_KNEE: (0.55, 0.7),
    })
    assert classify_exercise(pose) == "lunge"


def test_squat_rule_wins_over_overhead():
    pose = make_pose({
        PoseLandmark.LEFT_HIP: (0.45, 0.75),
        PoseLandmark.RIGHT_HIP: (0.55, 0.75),
        PoseLandmark.LEFT_WRIST: (0.3, 0.1),
        PoseLandmark.RIGHT_WRIST: (0.7, 0.1),
    })
    assert classify_exercise(pose) == "squat"


def test_classify_missing_critical_joint_raises():
    classifier = ExerciseClassifier()
    with pytest.raises(ClassificationError):
        classifier.classify(make_pose({PoseLandmark.RIGHT_ELBOW: None}))

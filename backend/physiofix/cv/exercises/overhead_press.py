"""Overhead press: elbow extension with the upper arm driven overhead."""

from physiofix.cv.exercises.base import (
    AnalysisResult,
    CountingConfig,
    CountingMode,
    ExerciseDefinition,
    indeterminate_result,
)
from physiofix.cv.geometry import calculate_angle, round_half_up
from physiofix.cv.pose import Pose, PoseLandmark


# Angle increases toward the peak, so thresholds run upward
COUNTING_CONFIG = CountingConfig(
    mode=CountingMode.MAX,
    start_angle=70,          # Hands at shoulders
    descend_threshold=80,    # Press begins
    peak_threshold=160,      # Full extension
    return_threshold=80,     # Back at shoulders
)

LOCKOUT_ELBOW_ANGLE = 165.0
LOCKOUT_SHOULDER_ANGLE = 150.0
RACK_ELBOW_ANGLE = 70.0


def analyze(pose: Pose) -> AnalysisResult:
    left_shoulder = pose[PoseLandmark.LEFT_SHOULDER]
    left_elbow = pose[PoseLandmark.LEFT_ELBOW]
    left_wrist = pose[PoseLandmark.LEFT_WRIST]
    left_hip = pose[PoseLandmark.LEFT_HIP]

    if None in (left_shoulder, left_elbow, left_wrist, left_hip):
        return indeterminate_result()

    elbow_angle = calculate_angle(left_shoulder, left_elbow, left_wrist)
    shoulder_angle = calculate_angle(left_hip, left_shoulder, left_elbow)

    if elbow_angle > LOCKOUT_ELBOW_ANGLE and shoulder_angle > LOCKOUT_SHOULDER_ANGLE:
        state = "extension_peak"
        feedback = "Hold Top"
    elif elbow_angle < RACK_ELBOW_ANGLE:
        state = "start_position"
        feedback = "Press Up"
    else:
        state = "pressing"
        feedback = "Push Through"

    return AnalysisResult(
        angle=round_half_up(elbow_angle),
        feedback=feedback,
        state=state,
        metrics={"shoulder_angle": round_half_up(shoulder_angle)},
    )


OVERHEAD_PRESS = ExerciseDefinition(
    id="overhead_press",
    name="Overhead Press",
    counting_config=COUNTING_CONFIG,
    analyze=analyze,
)

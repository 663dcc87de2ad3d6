"""
Forward lunge.

Either leg may lead, so the tracked angle is the more bent of the two
knees.
"""

from physiofix.cv.exercises.base import (
    AnalysisResult,
    CountingConfig,
    CountingMode,
    ExerciseDefinition,
    indeterminate_result,
)
from physiofix.cv.geometry import calculate_angle, round_half_up
from physiofix.cv.pose import Pose, PoseLandmark


COUNTING_CONFIG = CountingConfig(
    mode=CountingMode.MIN,
    start_angle=160,
    descend_threshold=140,
    peak_threshold=100,      # Front knee near 90
    return_threshold=150,
)

LUNGE_DEPTH_ANGLE = 100.0
KNEE_OVER_TOE_ANGLE = 70.0
DESCENDING_ANGLE = 140.0


def analyze(pose: Pose) -> AnalysisResult:
    left_hip = pose[PoseLandmark.LEFT_HIP]
    left_knee = pose[PoseLandmark.LEFT_KNEE]
    left_ankle = pose[PoseLandmark.LEFT_ANKLE]
    right_hip = pose[PoseLandmark.RIGHT_HIP]
    right_knee = pose[PoseLandmark.RIGHT_KNEE]
    right_ankle = pose[PoseLandmark.RIGHT_ANKLE]

    if None in (left_hip, left_knee, left_ankle, right_hip, right_knee, right_ankle):
        return indeterminate_result()

    left_angle = calculate_angle(left_hip, left_knee, left_ankle)
    right_angle = calculate_angle(right_hip, right_knee, right_ankle)
    active_angle = min(left_angle, right_angle)

    if active_angle < LUNGE_DEPTH_ANGLE:
        state = "lunge_depth"
        feedback = "Good Depth"
        # Too acute means the front knee has travelled past the toes
        if active_angle < KNEE_OVER_TOE_ANGLE:
            feedback = "Knee over toe!"
    elif active_angle < DESCENDING_ANGLE:
        state = "descending"
        feedback = "Drop Back Knee"
    else:
        state = "standing"
        feedback = "Step Forward"

    return AnalysisResult(
        angle=round_half_up(active_angle),
        feedback=feedback,
        state=state,
        metrics={"left_angle": left_angle, "right_angle": right_angle},
    )


LUNGE = ExerciseDefinition(
    id="lunge",
    name="Forward Lunge",
    counting_config=COUNTING_CONFIG,
    analyze=analyze,
)

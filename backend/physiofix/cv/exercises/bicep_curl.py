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
    start_angle=150,         # Arm extended
    descend_threshold=130,   # Curl begins
    peak_threshold=60,       # Fully curled
    return_threshold=140,
)

EXTENDED_ANGLE = 160.0
FLEXED_ANGLE = 60.0


def analyze(pose: Pose) -> AnalysisResult:
    """Left elbow flexion angle (shoulder-elbow-wrist)."""
    left_shoulder = pose[PoseLandmark.LEFT_SHOULDER]
    left_elbow = pose[PoseLandmark.LEFT_ELBOW]
    left_wrist = pose[PoseLandmark.LEFT_WRIST]

    if None in (left_shoulder, left_elbow, left_wrist):
        return indeterminate_result()

    elbow_angle = calculate_angle(left_shoulder, left_elbow, left_wrist)

    if elbow_angle > EXTENDED_ANGLE:
        state = "extension"
        feedback = "Curl Up"
    elif elbow_angle < FLEXED_ANGLE:
        state = "flexion"
        feedback = "Squeeze"
    else:
        state = "moving"
        feedback = "Control It"

    return AnalysisResult(
        angle=round_half_up(elbow_angle),
        feedback=feedback,
        state=state,
    )


BICEP_CURL = ExerciseDefinition(
    id="bicep_curl",
    name="Bicep Curl",
    counting_config=COUNTING_CONFIG,
    analyze=analyze,
)

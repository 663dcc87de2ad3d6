"""
Bodyweight squat.

Tracks the average knee angle (hip-knee-ankle) of both legs and checks:
- Knee valgus: knees closer together than 70% of the ankle spread
- Back lean: torso more than 45 degrees off vertical
"""

from physiofix.cv.exercises.base import (
    AnalysisResult,
    CountingConfig,
    CountingMode,
    ExerciseDefinition,
    indeterminate_result,
)
from physiofix.cv.geometry import calculate_angle, round_half_up
from physiofix.cv.pose import Landmark, Pose, PoseLandmark


COUNTING_CONFIG = CountingConfig(
    mode=CountingMode.MIN,
    start_angle=160,
    descend_threshold=140,
    peak_threshold=90,
    return_threshold=155,
)

VALGUS_RATIO = 0.7        # Knee spread below this fraction of ankle spread
MAX_BACK_ANGLE = 45.0     # Degrees from vertical
STANDING_ANGLE = 165.0
SQUAT_DEPTH_ANGLE = 110.0
DEEP_SQUAT_ANGLE = 90.0

GOOD_COLOR = "#22c55e"
WARN_COLOR = "#f97316"


def analyze(pose: Pose) -> AnalysisResult:
    left_hip = pose[PoseLandmark.LEFT_HIP]
    left_knee = pose[PoseLandmark.LEFT_KNEE]
    left_ankle = pose[PoseLandmark.LEFT_ANKLE]
    right_hip = pose[PoseLandmark.RIGHT_HIP]
    right_knee = pose[PoseLandmark.RIGHT_KNEE]
    right_ankle = pose[PoseLandmark.RIGHT_ANKLE]
    left_shoulder = pose[PoseLandmark.LEFT_SHOULDER]

    if None in (left_hip, left_knee, left_ankle, right_hip, right_knee, right_ankle, left_shoulder):
        return indeterminate_result()

    # 1. Depth
    left_angle = calculate_angle(left_hip, left_knee, left_ankle)
    right_angle = calculate_angle(right_hip, right_knee, right_ankle)
    avg_knee_angle = (left_angle + right_angle) / 2

    # 2. Valgus (knee spread vs ankle spread)
    ankle_dist = abs(left_ankle.x - right_ankle.x)
    knee_dist = abs(left_knee.x - right_knee.x)
    is_valgus = knee_dist < ankle_dist * VALGUS_RATIO

    # 3. Back angle against a vertical reference above the hip
    vertical_ref = Landmark(x=left_hip.x, y=left_hip.y - 0.5, z=0.0)
    back_angle = calculate_angle(vertical_ref, left_hip, left_shoulder)
    is_leaning = back_angle > MAX_BACK_ANGLE

    feedback = "Good Form"
    if avg_knee_angle < STANDING_ANGLE:
        if avg_knee_angle < DEEP_SQUAT_ANGLE:
            state = "deep_squat"
        elif avg_knee_angle < SQUAT_DEPTH_ANGLE:
            state = "squat_depth"
        else:
            state = "descending"

        if is_valgus:
            feedback = "Push Knees Out!"
        elif is_leaning:
            feedback = "Keep Chest Up!"
        elif state == "descending":
            feedback = "Go Lower"
        elif state == "squat_depth":
            feedback = "Perfect Depth"
    else:
        feedback = "Ready"
        state = "standing"

    return AnalysisResult(
        angle=round_half_up(avg_knee_angle),
        feedback=feedback,
        state=state,
        metrics={"valgus": is_valgus, "leaning": is_leaning},
        visuals={
            "focus_point": int(PoseLandmark.LEFT_KNEE),
            "highlights": [
                int(PoseLandmark.LEFT_KNEE),
                int(PoseLandmark.RIGHT_KNEE),
                int(PoseLandmark.LEFT_HIP),
                int(PoseLandmark.RIGHT_HIP),
            ],
            "color": GOOD_COLOR if feedback in ("Good Form", "Perfect Depth") else WARN_COLOR,
        },
    )


SQUAT = ExerciseDefinition(
    id="squat",
    name="Bodyweight Squat",
    counting_config=COUNTING_CONFIG,
    analyze=analyze,
)

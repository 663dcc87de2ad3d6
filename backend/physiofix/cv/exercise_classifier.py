"""
Heuristic exercise detection for "auto" mode.

DECISION RULES (fixed priority, first match wins):

1. SQUAT: hips have dropped to knee level
   - Average hip-to-knee vertical gap below 0.15

2. OVERHEAD: both wrists well above the shoulders (> 0.1)
   - Wrists close together (< 0.15 apart) -> overhead_reach
   - Otherwise -> overhead_press

3. T-POSE: wrists level with shoulders (< 0.15) and spread wide (> 0.5)
   -> lateral_raise

4. CURL: both wrists above their elbows, not overhead -> bicep_curl

5. LUNGE: knees at clearly different heights (> 0.15) -> lunge

6. Default -> standing

There is no scoring or voting. The classifier is evaluated fresh on every
frame and keeps no state.
"""

from typing import Optional
import logging

from physiofix.cv.pose import Pose, PoseLandmark

logger = logging.getLogger(__name__)


class ClassificationError(ValueError):
    """Raised when a critical joint is missing and no rule can be evaluated."""


SQUAT = "squat"
OVERHEAD_REACH = "overhead_reach"
OVERHEAD_PRESS = "overhead_press"
LATERAL_RAISE = "lateral_raise"
BICEP_CURL = "bicep_curl"
LUNGE = "lunge"
STANDING = "standing"


class ExerciseClassifier:
    """
    Classifies the exercise being performed from a single pose.

    Coordinates are normalized image coordinates: y grows downward, so
    "above" means a smaller y.
    """

    SQUAT_DEPTH_GAP = 0.15        # Hip-knee vertical gap at squat depth
    OVERHEAD_MARGIN = 0.1         # Wrist must clear shoulder by this much
    HANDS_JOINED_DISTANCE = 0.15
    HANDS_LEVEL_TOLERANCE = 0.15
    HANDS_WIDE_DISTANCE = 0.5
    KNEE_ASYMMETRY = 0.15

    CRITICAL_JOINTS = (
        PoseLandmark.LEFT_WRIST,
        PoseLandmark.RIGHT_WRIST,
        PoseLandmark.LEFT_SHOULDER,
        PoseLandmark.RIGHT_SHOULDER,
        PoseLandmark.LEFT_ELBOW,
        PoseLandmark.RIGHT_ELBOW,
        PoseLandmark.LEFT_HIP,
        PoseLandmark.RIGHT_HIP,
        PoseLandmark.LEFT_KNEE,
        PoseLandmark.RIGHT_KNEE,
    )

    def classify(self, pose: Optional[Pose]) -> str:
        """
        Return the best-guess exercise id for a pose.

        Raises:
            ClassificationError: If any critical joint is missing
        """
        if pose is None:
            return STANDING

        missing = [j.name.lower() for j in self.CRITICAL_JOINTS if pose.get(j) is None]
        if missing:
            raise ClassificationError(f"Missing joints for classification: {', '.join(missing)}")

        left_wrist = pose[PoseLandmark.LEFT_WRIST]
        right_wrist = pose[PoseLandmark.RIGHT_WRIST]
        left_shoulder = pose[PoseLandmark.LEFT_SHOULDER]
        right_shoulder = pose[PoseLandmark.RIGHT_SHOULDER]
        left_elbow = pose[PoseLandmark.LEFT_ELBOW]
        right_elbow = pose[PoseLandmark.RIGHT_ELBOW]
        left_hip = pose[PoseLandmark.LEFT_HIP]
        right_hip = pose[PoseLandmark.RIGHT_HIP]
        left_knee = pose[PoseLandmark.LEFT_KNEE]
        right_knee = pose[PoseLandmark.RIGHT_KNEE]

        # === 1. Squatting: hip height approaches knee height ===
        hip_knee_gap = (abs(left_hip.y - left_knee.y) + abs(right_hip.y - right_knee.y)) / 2
        if hip_knee_gap < self.SQUAT_DEPTH_GAP:
            return SQUAT

        # === 2. Hands overhead ===
        is_hands_overhead = (
            left_wrist.y < left_shoulder.y - self.OVERHEAD_MARGIN
            and right_wrist.y < right_shoulder.y - self.OVERHEAD_MARGIN
        )
        wrist_spread = abs(left_wrist.x - right_wrist.x)
        if is_hands_overhead:
            if wrist_spread < self.HANDS_JOINED_DISTANCE:
                return OVERHEAD_REACH
            return OVERHEAD_PRESS

        # === 3. T-pose ===
        is_hands_level = (
            abs(left_wrist.y - left_shoulder.y) < self.HANDS_LEVEL_TOLERANCE
            and abs(right_wrist.y - right_shoulder.y) < self.HANDS_LEVEL_TOLERANCE
        )
        if is_hands_level and wrist_spread > self.HANDS_WIDE_DISTANCE:
            return LATERAL_RAISE

        # === 4. Curl: wrists above elbows ===
        if left_wrist.y < left_elbow.y and right_wrist.y < right_elbow.y:
            return BICEP_CURL

        # === 5. Lunge: knee asymmetry ===
        if abs(left_knee.y - right_knee.y) > self.KNEE_ASYMMETRY:
            return LUNGE

        return STANDING


_classifier = ExerciseClassifier()


def classify_exercise(pose: Optional[Pose]) -> str:
    """Convenience function to classify a single pose."""
    return _classifier.classify(pose)

"""
Motion-analysis pipeline for exercise rep counting and form feedback.

PIPELINE COMPONENTS:
1. LandmarkSmoother: Velocity-adaptive exponential smoothing
2. Geometry: Joint angle and distance primitives
3. Exercise definitions: Squat, OverheadPress, BicepCurl, Lunge
4. Exercise registry: Lookup from exercise id to definition
5. ExerciseClassifier: Heuristic exercise detection for auto mode
6. CalibrationService: Learns resting angle and range of motion
7. WorkoutStateMachine: Hysteresis rep counter with debounce
8. SafetyGuard: Velocity, knee valgus and struggle detection
9. AnalysisPipeline: Per-frame orchestration

Usage:
    from physiofix.cv import AnalysisPipeline, Pose

    pipeline = AnalysisPipeline("squat")
    for landmarks, ts in frames:
        result = pipeline.process_frame(Pose.from_landmarks(landmarks), timestamp=ts)
        if result.rep_completed:
            print(f"Reps: {result.rep_count}")
"""

from physiofix.cv.pose import Landmark, Pose, PoseLandmark, PoseShapeError, NUM_LANDMARKS
from physiofix.cv.geometry import calculate_angle, calculate_distance
from physiofix.cv.landmark_smoother import LandmarkSmoother
from physiofix.cv.exercises import (
    AnalysisResult,
    CountingConfig,
    CountingMode,
    ExerciseDefinition,
    ExerciseId,
    EXERCISES,
    analyze_exercise,
    get_exercise,
)
from physiofix.cv.exercise_classifier import (
    ExerciseClassifier,
    ClassificationError,
    classify_exercise,
)
from physiofix.cv.calibration import (
    CalibrationService,
    CalibrationState,
    CalibrationRecord,
    CalibrationProgress,
)
from physiofix.cv.workout_state_machine import WorkoutStateMachine, WorkoutPhase, REP_COMPLETE
from physiofix.cv.safety_guard import SafetyGuard
from physiofix.cv.analysis_pipeline import AnalysisPipeline, FrameResult, AUTO_MODE

__all__ = [
    # Pose model
    "Landmark",
    "Pose",
    "PoseLandmark",
    "PoseShapeError",
    "NUM_LANDMARKS",

    # Geometry
    "calculate_angle",
    "calculate_distance",

    # Smoothing
    "LandmarkSmoother",

    # Exercise catalog
    "AnalysisResult",
    "CountingConfig",
    "CountingMode",
    "ExerciseDefinition",
    "ExerciseId",
    "EXERCISES",
    "analyze_exercise",
    "get_exercise",

    # Classification
    "ExerciseClassifier",
    "ClassificationError",
    "classify_exercise",

    # Calibration
    "CalibrationService",
    "CalibrationState",
    "CalibrationRecord",
    "CalibrationProgress",

    # Rep counting
    "WorkoutStateMachine",
    "WorkoutPhase",
    "REP_COMPLETE",

    # Safety
    "SafetyGuard",

    # Main pipeline
    "AnalysisPipeline",
    "FrameResult",
    "AUTO_MODE",
]

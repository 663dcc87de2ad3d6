"""
Exercise catalog.

Each definition bundles a CountingConfig with a pure analyze(pose)
function. Adding an exercise means adding a module here and one entry to
ExerciseId / EXERCISES; nothing else in the pipeline changes.
"""

from enum import Enum
from typing import Dict, Optional, Union

from physiofix.cv.exercises.base import (
    AnalysisResult,
    CountingConfig,
    CountingMode,
    ExerciseDefinition,
    indeterminate_result,
)
from physiofix.cv.exercises.squat import SQUAT
from physiofix.cv.exercises.overhead_press import OVERHEAD_PRESS
from physiofix.cv.exercises.bicep_curl import BICEP_CURL
from physiofix.cv.exercises.lunge import LUNGE
from physiofix.cv.pose import Pose


class ExerciseId(str, Enum):
    """Identifiers of the exercises with a counting definition."""
    SQUAT = "squat"
    OVERHEAD_PRESS = "overhead_press"
    BICEP_CURL = "bicep_curl"
    LUNGE = "lunge"

    @classmethod
    def all(cls) -> list:
        return [e.value for e in cls]


EXERCISES: Dict[ExerciseId, ExerciseDefinition] = {
    ExerciseId.SQUAT: SQUAT,
    ExerciseId.OVERHEAD_PRESS: OVERHEAD_PRESS,
    ExerciseId.BICEP_CURL: BICEP_CURL,
    ExerciseId.LUNGE: LUNGE,
}


def get_exercise(exercise_id: Union[str, ExerciseId, None]) -> Optional[ExerciseDefinition]:
    """Look up a definition by id; unknown ids return None."""
    try:
        return EXERCISES[ExerciseId(exercise_id)]
    except ValueError:
        return None


def analyze_exercise(pose: Pose, exercise_id: Union[str, ExerciseId, None]) -> AnalysisResult:
    """Run the definition's analysis and attach the named-landmark view."""
    exercise = get_exercise(exercise_id)
    if exercise is None:
        result = indeterminate_result(feedback="Unknown Exercise")
    else:
        result = exercise.analyze(pose)
    result.pose_coords = pose.named()
    return result


__all__ = [
    "AnalysisResult",
    "CountingConfig",
    "CountingMode",
    "ExerciseDefinition",
    "ExerciseId",
    "EXERCISES",
    "get_exercise",
    "analyze_exercise",
    "SQUAT",
    "OVERHEAD_PRESS",
    "BICEP_CURL",
    "LUNGE",
]

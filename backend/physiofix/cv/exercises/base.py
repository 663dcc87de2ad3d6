"""Shared types for exercise definitions."""

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Optional
from enum import Enum

from physiofix.cv.pose import Pose, PoseCoords


class CountingMode(str, Enum):
    """Direction the tracked angle moves toward the rep's peak."""
    MIN = "min"  # Angle decreases toward peak (squat, curl, lunge)
    MAX = "max"  # Angle increases toward peak (overhead press)


@dataclass(frozen=True)
class CountingConfig:
    """Named thresholds driving the workout state machine (degrees)."""
    mode: CountingMode
    start_angle: float
    descend_threshold: float
    peak_threshold: float
    return_threshold: float
    metric: str = "angle"

    def with_peak_threshold(self, peak_threshold: float) -> "CountingConfig":
        return replace(self, peak_threshold=peak_threshold)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "start_angle": self.start_angle,
            "descend_threshold": self.descend_threshold,
            "peak_threshold": self.peak_threshold,
            "return_threshold": self.return_threshold,
            "metric": self.metric,
        }


@dataclass
class AnalysisResult:
    """
    Per-frame analysis record.

    angle is the tracked joint angle in degrees; 0 means indeterminate
    (required landmarks missing), not fully flexed.
    """
    angle: float
    feedback: str
    state: str
    metrics: Dict[str, Any] = field(default_factory=dict)
    pose_coords: Optional[PoseCoords] = None
    visuals: Optional[Dict[str, Any]] = None

    @property
    def is_indeterminate(self) -> bool:
        return not self.angle

    def to_dict(self) -> Dict[str, Any]:
        return {
            "angle": self.angle,
            "feedback": self.feedback,
            "state": self.state,
            "metrics": self.metrics,
            "pose_coords": {
                name: lm.to_dict() if lm else None
                for name, lm in (self.pose_coords or {}).items()
            },
            "visuals": self.visuals,
        }


def indeterminate_result(feedback: str = "Waiting...", state: str = "idle") -> AnalysisResult:
    """Result emitted when the landmarks an exercise needs are missing."""
    return AnalysisResult(angle=0, feedback=feedback, state=state)


@dataclass(frozen=True)
class ExerciseDefinition:
    """Immutable catalog entry: counting thresholds plus the per-frame analysis."""
    id: str
    name: str
    counting_config: CountingConfig
    analyze: Callable[[Pose], AnalysisResult]
    type: str = "reps"

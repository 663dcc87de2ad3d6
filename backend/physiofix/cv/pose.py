"""
Pose data model for the motion-analysis pipeline.

A pose is the ordered set of 33 body landmarks produced once per video
frame by an external pose-detection provider (MediaPipe Pose ordering).
Coordinates are normalized to the frame (0-1, y increases downward).

Poses are never mutated by the pipeline: every stage derives a new value.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple
from enum import IntEnum


NUM_LANDMARKS = 33


class PoseShapeError(ValueError):
    """Raised when a pose does not have the landmark count the consumer expects."""


class PoseLandmark(IntEnum):
    """MediaPipe Pose landmark indices."""
    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32


@dataclass(frozen=True)
class Landmark:
    """Single landmark with 3D position and visibility."""
    x: float  # Normalized x coordinate (0-1)
    y: float  # Normalized y coordinate (0-1)
    z: float = 0.0  # Depth relative to hips
    visibility: float = 1.0  # Confidence score (0-1)

    @classmethod
    def coerce(cls, point: Any) -> Optional["Landmark"]:
        """Build a Landmark from a mapping or any object exposing x/y/z/visibility."""
        if point is None or isinstance(point, Landmark):
            return point
        if isinstance(point, dict):
            return cls(
                x=float(point["x"]),
                y=float(point["y"]),
                z=float(point.get("z", 0.0)),
                visibility=float(point.get("visibility", 1.0)),
            )
        return cls(
            x=float(point.x),
            y=float(point.y),
            z=float(getattr(point, "z", 0.0)),
            visibility=float(getattr(point, "visibility", 1.0)),
        )

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "z": self.z, "visibility": self.visibility}


# Named view used by the safety guard and exposed in every analysis record
PoseCoords = Dict[str, Optional[Landmark]]


@dataclass(frozen=True)
class Pose:
    """
    Complete pose for a single frame.

    Landmarks may be None where the provider reported nothing for a joint;
    consumers degrade gracefully on missing joints.
    """
    landmarks: Tuple[Optional[Landmark], ...] = field(default_factory=tuple)
    timestamp: Optional[float] = None

    @classmethod
    def from_landmarks(
        cls,
        points: Iterable[Any],
        timestamp: Optional[float] = None
    ) -> "Pose":
        """Create a Pose from dicts, Landmarks or provider landmark objects."""
        return cls(
            landmarks=tuple(Landmark.coerce(p) for p in points),
            timestamp=timestamp
        )

    @classmethod
    def from_mediapipe_tasks(cls, result, timestamp: Optional[float] = None) -> Optional["Pose"]:
        """Create a Pose from a MediaPipe Tasks PoseLandmarker result (first person only)."""
        if not result.pose_landmarks or len(result.pose_landmarks) == 0:
            return None
        return cls.from_landmarks(result.pose_landmarks[0], timestamp=timestamp)

    def __len__(self) -> int:
        return len(self.landmarks)

    def __getitem__(self, index: int) -> Optional[Landmark]:
        return self.get(index)

    def get(self, index: int) -> Optional[Landmark]:
        """Safely get landmark by index."""
        if 0 <= index < len(self.landmarks):
            return self.landmarks[index]
        return None

    def named(self) -> PoseCoords:
        """Map landmarks to snake_case joint names (left_hip, right_knee, ...)."""
        return {lm.name.lower(): self.get(lm) for lm in PoseLandmark}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "timestamp": self.timestamp,
            "landmarks": [lm.to_dict() if lm else None for lm in self.landmarks]
        }

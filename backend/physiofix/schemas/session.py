"""Session schemas."""

from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field, field_validator

from physiofix.cv.exercises import ExerciseId
from physiofix.cv.analysis_pipeline import AUTO_MODE
from physiofix.cv.pose import NUM_LANDMARKS


class LandmarkIn(BaseModel):
    """One normalized landmark as produced by the pose detector."""
    x: float
    y: float
    z: float = 0.0
    visibility: float = 1.0


class SessionCreate(BaseModel):
    """Schema for opening an analysis session."""
    exercise_id: str = Field(..., description="Exercise to count: squat, overhead_press, bicep_curl, lunge, or auto")

    @field_validator("exercise_id")
    @classmethod
    def validate_exercise_id(cls, v: str) -> str:
        valid_ids = ExerciseId.all() + [AUTO_MODE]
        if v not in valid_ids:
            raise ValueError(f"exercise_id must be one of: {valid_ids}")
        return v


class FramePayload(BaseModel):
    """One frame of pose landmarks; undetected landmarks are null."""
    landmarks: List[Optional[LandmarkIn]]
    timestamp: Optional[float] = None  # Seconds, any monotonic base

    @field_validator("landmarks")
    @classmethod
    def validate_landmark_count(cls, v: List[Optional[LandmarkIn]]) -> List[Optional[LandmarkIn]]:
        if len(v) != NUM_LANDMARKS:
            raise ValueError(f"expected {NUM_LANDMARKS} landmarks, got {len(v)}")
        return v


class SessionResponse(BaseModel):
    """Schema for session state."""
    session_id: str
    selected_exercise: str
    active_exercise: Optional[str]
    workout_state: str
    rep_count: int
    calories: float
    calibration_state: str


class CalibrationResponse(BaseModel):
    """Schema for a calibration run being started."""
    session_id: str
    calibration_state: str
    message: str


class AnalysisOut(BaseModel):
    angle: float
    feedback: str
    state: str
    metrics: Dict[str, Any] = Field(default_factory=dict)
    pose_coords: Optional[Dict[str, Any]] = None
    visuals: Optional[Dict[str, Any]] = None


class CalibrationProgressOut(BaseModel):
    state: str
    progress: float
    message: Optional[str] = None


class FrameResponse(BaseModel):
    """Schema for the result of one processed frame."""
    exercise_id: Optional[str]
    analysis: AnalysisOut
    workout_state: str
    rep_count: int
    rep_completed: bool
    calibration_state: str
    calibration: Optional[CalibrationProgressOut] = None
    safety_warnings: List[str] = Field(default_factory=list)
    cue: Optional[str] = None
    calories: float


class SafetyFlag(BaseModel):
    timestamp: float
    message: str


class SessionSummary(BaseModel):
    """
    Schema for a session summary.

    rom holds the min/max counted angle; calibration is the completed
    record (restingAngle, peakAngle, rom) or null.
    """
    session_id: str
    selected_exercise: str
    active_exercise: Optional[str]
    frames_processed: int
    workout_state: str
    rep_count: int
    calories: float
    rom: Dict[str, Optional[float]]
    calibration_state: str
    calibration: Optional[Dict[str, float]] = None
    safety_flags: List[SafetyFlag] = Field(default_factory=list)


class ExerciseResponse(BaseModel):
    """Schema for a catalog entry."""
    id: str
    name: str
    type: str
    counting_config: Dict[str, Any]

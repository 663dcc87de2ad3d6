"""Pydantic schemas for API request/response models."""

from physiofix.schemas.session import (
    LandmarkIn,
    SessionCreate,
    FramePayload,
    SessionResponse,
    CalibrationResponse,
    FrameResponse,
    SessionSummary,
    ExerciseResponse,
)

__all__ = [
    "LandmarkIn",
    "SessionCreate",
    "FramePayload",
    "SessionResponse",
    "CalibrationResponse",
    "FrameResponse",
    "SessionSummary",
    "ExerciseResponse",
]

"""Live analysis session endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from physiofix.cv.analysis_pipeline import AnalysisPipeline
from physiofix.cv.pose import Pose, PoseShapeError
from physiofix.session_manager import SessionLimitError, SessionManager, get_session_manager
from physiofix.schemas.session import (
    SessionCreate,
    SessionResponse,
    FramePayload,
    FrameResponse,
    CalibrationResponse,
    SessionSummary,
)

router = APIRouter()


def _get_pipeline(session_id: str, manager: SessionManager) -> AnalysisPipeline:
    pipeline = manager.get_session(session_id)
    if pipeline is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found"
        )
    return pipeline


def _session_response(session_id: str, pipeline: AnalysisPipeline) -> SessionResponse:
    return SessionResponse(
        session_id=session_id,
        selected_exercise=pipeline.selected_exercise,
        active_exercise=pipeline.active_exercise,
        workout_state=pipeline.state_machine.current_state.value,
        rep_count=pipeline.rep_count,
        calories=pipeline.calories,
        calibration_state=pipeline.calibration.state.value,
    )


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    payload: SessionCreate,
    manager: SessionManager = Depends(get_session_manager)
):
    """Open a session for one exercise (or "auto" to classify each frame)."""
    try:
        session_id = manager.create_session(payload.exercise_id)
    except SessionLimitError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e)
        )

    return _session_response(session_id, manager.get_session(session_id))


@router.post("/{session_id}/frames", response_model=FrameResponse)
async def process_frame(
    session_id: str,
    payload: FramePayload,
    manager: SessionManager = Depends(get_session_manager)
):
    """Run one frame of landmarks through the session's pipeline."""
    pipeline = _get_pipeline(session_id, manager)

    pose = Pose.from_landmarks(payload.landmarks, timestamp=payload.timestamp)
    try:
        result = pipeline.process_frame(pose)
    except PoseShapeError as e:
        raise HTTPException(
            status_code=422,
            detail=str(e)
        )

    return result.to_dict()


@router.post("/{session_id}/calibration", response_model=CalibrationResponse)
async def start_calibration(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager)
):
    """Start a calibration run; following frames feed it until COMPLETE."""
    pipeline = _get_pipeline(session_id, manager)
    message = pipeline.start_calibration()

    return CalibrationResponse(
        session_id=session_id,
        calibration_state=pipeline.calibration.state.value,
        message=message
    )


@router.post("/{session_id}/reset", response_model=SessionResponse)
async def reset_workout(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager)
):
    """Zero the rep count; calibration is kept."""
    pipeline = _get_pipeline(session_id, manager)
    pipeline.reset_workout()
    return _session_response(session_id, pipeline)


@router.get("/{session_id}", response_model=SessionSummary)
async def get_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager)
):
    """Get the session summary so far."""
    pipeline = _get_pipeline(session_id, manager)
    return SessionSummary(session_id=session_id, **pipeline.get_summary())


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def end_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager)
):
    """Close a session, persisting a completed calibration."""
    if manager.end_session(session_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found"
        )

    return Response(status_code=status.HTTP_204_NO_CONTENT)

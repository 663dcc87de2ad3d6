"""Exercise catalog endpoints."""

from typing import List

from fastapi import APIRouter, HTTPException, status

from physiofix.cv.exercises import EXERCISES, ExerciseDefinition, get_exercise
from physiofix.schemas.session import ExerciseResponse

router = APIRouter()


def _exercise_response(exercise: ExerciseDefinition) -> ExerciseResponse:
    return ExerciseResponse(
        id=exercise.id,
        name=exercise.name,
        type=exercise.type,
        counting_config=exercise.counting_config.to_dict()
    )


@router.get("", response_model=List[ExerciseResponse])
async def list_exercises():
    """List the exercises with a counting definition."""
    return [_exercise_response(e) for e in EXERCISES.values()]


@router.get("/{exercise_id}", response_model=ExerciseResponse)
async def get_exercise_definition(exercise_id: str):
    exercise = get_exercise(exercise_id)
    if exercise is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Exercise not found"
        )
    return _exercise_response(exercise)

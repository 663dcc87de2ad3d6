"""
Per-frame motion analysis pipeline.

PIPELINE STAGES (one pass per incoming video frame):
1. Landmark smoothing (velocity-adaptive EMA)
2. Exercise classification (auto mode only)
3. Exercise analysis (angle, form feedback)
4. Calibration OR rep counting (never both for one frame)
5. Safety checks (velocity, valgus, struggle)
6. Session stats and coaching cue selection

Each AnalysisPipeline owns all mutable state for one session; nothing is
shared between sessions. No stage blocks.
"""

import time
from collections import deque
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple
import logging

from physiofix.config import Settings, get_settings
from physiofix.cv.calibration import CalibrationProgress, CalibrationService
from physiofix.cv.exercise_classifier import ClassificationError, ExerciseClassifier
from physiofix.cv.exercises import AnalysisResult, analyze_exercise, get_exercise
from physiofix.cv.landmark_smoother import LandmarkSmoother
from physiofix.cv.pose import Pose
from physiofix.cv.safety_guard import SafetyGuard
from physiofix.cv.workout_state_machine import REP_COMPLETE, WorkoutStateMachine
from physiofix.storage import CalibrationStore, get_calibration_store

logger = logging.getLogger(__name__)


AUTO_MODE = "auto"


@dataclass
class FrameResult:
    """Everything the host needs to render and voice one frame."""
    exercise_id: Optional[str]
    analysis: AnalysisResult
    workout_state: str
    rep_count: int
    calibration_state: str
    rep_completed: bool = False
    calibration: Optional[CalibrationProgress] = None
    safety_warnings: List[str] = field(default_factory=list)
    cue: Optional[str] = None  # Text for the voice collaborator, throttled
    calories: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exercise_id": self.exercise_id,
            "analysis": self.analysis.to_dict(),
            "workout_state": self.workout_state,
            "rep_count": self.rep_count,
            "rep_completed": self.rep_completed,
            "calibration_state": self.calibration_state,
            "calibration": self.calibration.to_dict() if self.calibration else None,
            "safety_warnings": list(self.safety_warnings),
            "cue": self.cue,
            "calories": self.calories,
        }


class AnalysisPipeline:
    """
    Session-scoped orchestrator composing smoother, classifier, exercise
    definitions, calibration, rep counter and safety guard.

    Switching the active exercise discards the rep counter and safety
    guard, resets calibration and reloads the persisted record for the new
    exercise.
    """

    GOOD_REP_CUE = "Good rep!"

    # Feedback that is shown but never spoken
    CHATTY_FEEDBACK = frozenset({"Good", "Good Form", "Ready", "Waiting...", "Perfect Depth"})

    def __init__(
        self,
        exercise_id: Optional[str] = None,
        settings: Optional[Settings] = None,
        store: Optional[CalibrationStore] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize pipeline.

        Args:
            exercise_id: Catalog id, or "auto" to classify every frame
            settings: Application settings (cached settings if None)
            store: Calibration record store (configured backend if None)
            clock: Time source in seconds for frames without a timestamp
        """
        self.settings = settings or get_settings()
        self.selected_exercise = exercise_id or self.settings.default_exercise
        self.store = store if store is not None else get_calibration_store(self.settings)
        self._clock = clock

        self.smoother = LandmarkSmoother(self.settings.smoothing_alpha)
        self.classifier = ExerciseClassifier()
        self.calibration = CalibrationService()
        self.state_machine = self._new_state_machine()
        self.safety_guard = SafetyGuard(clock=self._clock)

        self.active_exercise: Optional[str] = None
        self.frames_processed = 0
        self.rom_min: Optional[float] = None
        self.rom_max: Optional[float] = None
        self.safety_flags: Deque[Tuple[float, str]] = deque(maxlen=self.settings.max_safety_flags)
        self._last_cue_time: Optional[float] = None

        if not self.is_auto:
            self._activate_exercise(self.selected_exercise)

        logger.info(f"AnalysisPipeline initialized: exercise={self.selected_exercise}")

    @property
    def is_auto(self) -> bool:
        return self.selected_exercise == AUTO_MODE

    @property
    def rep_count(self) -> int:
        return self.state_machine.rep_count

    @property
    def calories(self) -> float:
        return self.rep_count * self.settings.calories_per_rep

    def _new_state_machine(self) -> WorkoutStateMachine:
        return WorkoutStateMachine(
            clock=self._clock,
            debounce_seconds=self.settings.state_debounce_seconds
        )

    def process_frame(self, pose: Pose, timestamp: Optional[float] = None) -> FrameResult:
        """
        Run one full pipeline pass.

        Args:
            pose: Raw pose from the detector
            timestamp: Frame time in seconds (pose.timestamp, then the clock, if None)

        Returns:
            FrameResult for this frame

        Raises:
            PoseShapeError: If the landmark count changes mid-stream
        """
        if timestamp is None:
            timestamp = pose.timestamp if pose.timestamp is not None else self._clock()
        self.frames_processed += 1

        # =========================================================
        # STAGE 1: Smoothing
        # =========================================================
        smoothed = self.smoother.smooth(pose)

        # =========================================================
        # STAGE 2: Classification (auto mode)
        # =========================================================
        exercise_id = self._resolve_exercise(smoothed)
        if exercise_id != self.active_exercise:
            self._activate_exercise(exercise_id)

        # =========================================================
        # STAGE 3: Analysis
        # =========================================================
        analysis = analyze_exercise(smoothed, exercise_id)
        result = self._frame_result(exercise_id, analysis)

        if self.frames_processed % 30 == 0:
            logger.debug(
                f"Frame {self.frames_processed}: exercise={exercise_id}, "
                f"angle={analysis.angle}, state={result.workout_state}, reps={result.rep_count}"
            )

        # Angle 0 means the required joints were missing: no calibration, no counting
        if analysis.is_indeterminate:
            return result

        # =========================================================
        # STAGE 4a: Calibration (exclusive with counting)
        # =========================================================
        if self.calibration.is_calibrating:
            result.calibration = self.calibration.update(analysis)
            result.calibration_state = self.calibration.state.value
            if self.calibration.is_complete:
                self.store.save(exercise_id, self.calibration.get_data())
            return result

        self._update_rom(analysis.angle)

        # =========================================================
        # STAGE 5: Safety
        # =========================================================
        warnings = self.safety_guard.analyze(analysis.pose_coords, exercise_id, now=timestamp)
        if warnings:
            analysis = replace(analysis, feedback=warnings[0])
            self.safety_flags.extend((timestamp, w) for w in warnings)

        # =========================================================
        # STAGE 4b: Rep counting
        # =========================================================
        exercise = get_exercise(exercise_id)
        config = self.calibration.apply_to_config(exercise.counting_config if exercise else None)
        signal = self.state_machine.update(analysis.angle, config, now=timestamp)

        # =========================================================
        # STAGE 6: Stats and cues
        # =========================================================
        result.analysis = analysis
        result.safety_warnings = warnings
        result.rep_completed = signal == REP_COMPLETE
        result.workout_state = self.state_machine.current_state.value
        result.rep_count = self.rep_count
        result.calories = self.calories
        result.cue = self._select_cue(result, timestamp)

        return result

    def _resolve_exercise(self, pose: Pose) -> str:
        if not self.is_auto:
            return self.selected_exercise

        try:
            return self.classifier.classify(pose)
        except ClassificationError as e:
            logger.debug(f"Classification failed, using {self.settings.fallback_exercise}: {e}")
            return self.settings.fallback_exercise

    def _activate_exercise(self, exercise_id: str):
        """Tear down per-exercise state and load the new exercise's calibration."""
        if self.active_exercise is not None:
            logger.info(f"Exercise changed: {self.active_exercise} -> {exercise_id}")
            if self.calibration.is_complete:
                self.store.save(self.active_exercise, self.calibration.get_data())

        self.state_machine = self._new_state_machine()
        self.safety_guard = SafetyGuard(clock=self._clock)
        self.calibration.reset()

        saved = self.store.load(exercise_id)
        if saved is not None:
            self.calibration.set_data(saved)
            logger.info(f"Loaded saved calibration for {exercise_id}")

        self.active_exercise = exercise_id

    def _frame_result(self, exercise_id: str, analysis: AnalysisResult) -> FrameResult:
        return FrameResult(
            exercise_id=exercise_id,
            analysis=analysis,
            workout_state=self.state_machine.current_state.value,
            rep_count=self.rep_count,
            calibration_state=self.calibration.state.value,
            calories=self.calories,
        )

    def _update_rom(self, angle: float):
        self.rom_min = angle if self.rom_min is None else min(self.rom_min, angle)
        self.rom_max = angle if self.rom_max is None else max(self.rom_max, angle)

    def _select_cue(self, result: FrameResult, now: float) -> Optional[str]:
        """Safety warnings are voiced immediately; everything else at most once per interval."""
        if result.safety_warnings:
            return result.safety_warnings[0]

        if self._last_cue_time is not None and now - self._last_cue_time <= self.settings.cue_interval_seconds:
            return None

        if result.rep_completed:
            cue = self.GOOD_REP_CUE
        elif result.analysis.feedback and result.analysis.feedback not in self.CHATTY_FEEDBACK:
            cue = result.analysis.feedback
        else:
            return None

        self._last_cue_time = now
        return cue

    def start_calibration(self) -> str:
        """Begin a calibration run for the active exercise."""
        return self.calibration.start()

    def reset_workout(self):
        """Zero the rep count and session ROM; calibration is kept."""
        self.state_machine.reset()
        self.rom_min = None
        self.rom_max = None

    def end_session(self) -> Dict[str, Any]:
        """Persist a completed calibration and return the session summary."""
        if self.active_exercise is not None and self.calibration.is_complete:
            self.store.save(self.active_exercise, self.calibration.get_data())
        summary = self.get_summary()
        self.safety_guard.reset()
        self.smoother.reset()
        logger.info(f"Session ended: {summary['rep_count']} reps of {self.active_exercise}")
        return summary

    def get_summary(self) -> Dict[str, Any]:
        """Get summary of the session so far."""
        calibration = self.calibration.get_data() if self.calibration.is_complete else None
        return {
            "selected_exercise": self.selected_exercise,
            "active_exercise": self.active_exercise,
            "frames_processed": self.frames_processed,
            "workout_state": self.state_machine.current_state.value,
            "rep_count": self.rep_count,
            "calories": self.calories,
            "rom": {"min": self.rom_min, "max": self.rom_max},
            "calibration_state": self.calibration.state.value,
            "calibration": calibration.to_dict() if calibration else None,
            "safety_flags": [
                {"timestamp": ts, "message": message} for ts, message in self.safety_flags
            ],
        }

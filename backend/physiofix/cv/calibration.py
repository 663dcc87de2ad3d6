"""
Per-exercise user calibration.

Learns the user's resting angle and peak range of motion so the rep
counter can relax its depth requirement for users with restricted
mobility.

STATES:
IDLE -> STATIC_CALIBRATION -> ROM_CALIBRATION -> COMPLETE

- STATIC_CALIBRATION: ~1s of standing still, resting angle = mean
- ROM_CALIBRATION: ~5s covering one full rep, peak = furthest extreme
- COMPLETE: terminal until reset() or set_data()

Calibration and rep counting are mutually exclusive for a frame: callers
must not feed the rep counter while a run is in progress.
"""

import numpy as np
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from enum import Enum
import logging

from physiofix.cv.exercises.base import AnalysisResult, CountingConfig, CountingMode

logger = logging.getLogger(__name__)


class CalibrationState(str, Enum):
    """Calibration run states."""
    IDLE = "IDLE"
    STATIC_CALIBRATION = "STATIC_CALIBRATION"
    ROM_CALIBRATION = "ROM_CALIBRATION"
    COMPLETE = "COMPLETE"

    @property
    def in_progress(self) -> bool:
        return self in (CalibrationState.STATIC_CALIBRATION, CalibrationState.ROM_CALIBRATION)


@dataclass
class CalibrationRecord:
    """Learned range of motion for one exercise (degrees)."""
    resting_angle: float = 180.0  # Angle when standing straight
    peak_angle: float = 90.0      # Angle at max depth/extension
    rom: float = 90.0

    def to_dict(self) -> Dict[str, float]:
        """Flat persisted form."""
        return {
            "restingAngle": self.resting_angle,
            "peakAngle": self.peak_angle,
            "rom": self.rom,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CalibrationRecord":
        """Parse the persisted form; missing fields keep their defaults."""
        record = cls()
        if "restingAngle" in data:
            record.resting_angle = float(data["restingAngle"])
        if "peakAngle" in data:
            record.peak_angle = float(data["peakAngle"])
        if "rom" in data:
            record.rom = float(data["rom"])
        return record


@dataclass
class CalibrationProgress:
    """Progress report for UI overlays."""
    state: CalibrationState
    progress: float
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"state": self.state.value, "progress": self.progress, "message": self.message}


class CalibrationService:
    """
    Calibration state machine for one exercise.

    Produces and consumes CalibrationRecord; persistence is left to the
    caller (see physiofix.storage).
    """

    STATIC_SAMPLES = 30   # ~1 second at 30fps
    ROM_SAMPLES = 150     # ~5 seconds at 30fps

    # Relaxed peak sits this far past the user's calibrated peak
    PEAK_BUFFER_DEGREES = 5.0

    START_MESSAGE = "Stand still for calibration..."
    ROM_MESSAGE = "Great! Now perform ONE full rep."
    COMPLETE_MESSAGE = "Calibration Complete!"

    def __init__(self):
        self.state = CalibrationState.IDLE
        self.data = CalibrationRecord()
        self._samples: List[float] = []

    def start(self) -> str:
        """Begin a fresh calibration run."""
        self.state = CalibrationState.STATIC_CALIBRATION
        self._samples = []
        logger.info("Calibration started")
        return self.START_MESSAGE

    def update(self, analysis: Optional[AnalysisResult]) -> CalibrationProgress:
        """Feed one frame's analysis into the current calibration step."""
        if analysis is None or not analysis.angle:
            return CalibrationProgress(state=self.state, progress=0)

        angle = float(analysis.angle)

        if self.state == CalibrationState.STATIC_CALIBRATION:
            self._samples.append(angle)
            if len(self._samples) < self.STATIC_SAMPLES:
                return CalibrationProgress(
                    state=self.state,
                    progress=len(self._samples) / self.STATIC_SAMPLES * 100
                )

            self.data.resting_angle = float(np.mean(self._samples))
            self.state = CalibrationState.ROM_CALIBRATION
            self._samples = []
            logger.info(f"Resting angle calibrated: {self.data.resting_angle:.1f}")
            return CalibrationProgress(state=self.state, progress=0, message=self.ROM_MESSAGE)

        if self.state == CalibrationState.ROM_CALIBRATION:
            self._samples.append(angle)
            if len(self._samples) < self.ROM_SAMPLES:
                return CalibrationProgress(
                    state=self.state,
                    progress=len(self._samples) / self.ROM_SAMPLES * 100
                )

            self._finish_rom()
            return CalibrationProgress(
                state=self.state, progress=100, message=self.COMPLETE_MESSAGE
            )

        return CalibrationProgress(state=self.state, progress=100)

    def _finish_rom(self):
        """Pick whichever extreme deviates more from rest as the peak."""
        min_angle = float(np.min(self._samples))
        max_angle = float(np.max(self._samples))
        resting = self.data.resting_angle

        if abs(resting - min_angle) > abs(resting - max_angle):
            self.data.peak_angle = min_angle
        else:
            self.data.peak_angle = max_angle
        self.data.rom = abs(resting - self.data.peak_angle)

        self.state = CalibrationState.COMPLETE
        self._samples = []
        logger.info(
            f"Calibration complete: resting={resting:.1f}, "
            f"peak={self.data.peak_angle:.1f}, rom={self.data.rom:.1f}"
        )

    def get_data(self) -> CalibrationRecord:
        return self.data

    def set_data(self, data: Optional[CalibrationRecord]):
        """Inject a previously persisted record and mark calibration complete."""
        if data is None:
            return
        self.data = CalibrationRecord(
            resting_angle=data.resting_angle,
            peak_angle=data.peak_angle,
            rom=data.rom
        )
        self.state = CalibrationState.COMPLETE

    def reset(self):
        self.state = CalibrationState.IDLE
        self._samples = []

    @property
    def is_complete(self) -> bool:
        return self.state == CalibrationState.COMPLETE

    @property
    def is_calibrating(self) -> bool:
        return self.state.in_progress

    def apply_to_config(self, config: Optional[CountingConfig]) -> Optional[CountingConfig]:
        """
        Relax the peak threshold for a user whose calibrated peak falls short of it.

        Only ever moves the threshold toward the start position; a user who
        can go deeper than the default keeps the default.
        """
        if config is None or not self.is_complete:
            return config

        peak = self.data.peak_angle
        if config.mode == CountingMode.MIN and peak > config.peak_threshold:
            return config.with_peak_threshold(peak + self.PEAK_BUFFER_DEGREES)
        if config.mode == CountingMode.MAX and peak < config.peak_threshold:
            return config.with_peak_threshold(peak - self.PEAK_BUFFER_DEGREES)
        return config

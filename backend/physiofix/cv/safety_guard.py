"""
Movement safety detection running alongside rep counting.

CHECKS (all run every call, several may fire in one frame):
1. Velocity: average hip speed above 3.5 units/s for more than 5
   consecutive evaluations -> "too fast" warning
2. Knee valgus (squat/lunge only): knee drifts inward of the hip-ankle
   midpoint by more than 0.06 -> side-specific warning
3. Struggle: hips nearly still (< 0.5 units/s) while the acceleration
   proxy exceeds 20 -> shaking warning. The proxy compares the current
   left-hip speed with the speed from the newest history sample to the
   previous left hip.

Only the first warning is meant to override the frame's feedback; callers
may log the rest.
"""

import time
from collections import deque
from typing import Callable, Deque, List, Optional
import logging

import numpy as np

from physiofix.cv.pose import Landmark, PoseCoords

logger = logging.getLogger(__name__)


TOO_FAST_WARNING = "Movement too fast! Slow down for safety."
LEFT_VALGUS_WARNING = "Left Knee collapsing inward (Valgus)! Push knees out."
RIGHT_VALGUS_WARNING = "Right Knee collapsing inward (Valgus)! Push knees out."
SHAKING_WARNING = "Form breakdown detected (Shaking). Reduce weight or rest."


class SafetyGuard:
    """
    Stateful safety detector for one exercise session.

    Keeps the previous pose, its timestamp, a short history of left-hip
    positions and a decaying counter of velocity violations.
    """

    MAX_HIP_SPEED = 3.5           # Normalized units / second
    MAX_VELOCITY_VIOLATIONS = 5   # Warn once the counter exceeds this
    VALGUS_DEVIATION = 0.06       # Normalized width
    STRUGGLE_MAX_SPEED = 0.5
    STRUGGLE_MIN_ACCELERATION = 20.0
    HISTORY_SIZE = 5

    VALGUS_EXERCISES = ("squat", "lunge")

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.velocity_history: Deque[Landmark] = deque(maxlen=self.HISTORY_SIZE)
        self.last_pose: Optional[PoseCoords] = None
        self.last_timestamp: Optional[float] = None
        self.velocity_violations = 0

    def analyze(
        self,
        pose: Optional[PoseCoords],
        exercise_id: Optional[str],
        now: Optional[float] = None
    ) -> List[str]:
        """
        Run all safety checks for one frame.

        Args:
            pose: Named-landmark view of the current pose
            exercise_id: Active exercise id
            now: Frame time in seconds (defaults to the clock)

        Returns:
            Warning messages, most urgent first
        """
        if not pose:
            return []
        if now is None:
            now = self._clock()

        warnings: List[str] = []

        if self.last_timestamp is not None and now < self.last_timestamp:
            logger.debug(f"Timestamp went back ({self.last_timestamp} -> {now}), restarting motion history")
            self.velocity_history.clear()
            self.last_pose = None
            self.last_timestamp = None

        left_hip = pose.get("left_hip")
        right_hip = pose.get("right_hip")
        prev_left_hip = self.last_pose.get("left_hip") if self.last_pose else None
        prev_right_hip = self.last_pose.get("right_hip") if self.last_pose else None

        dt = now - self.last_timestamp if self.last_timestamp is not None else 0.0
        hips_tracked = None not in (left_hip, right_hip, prev_left_hip, prev_right_hip)

        # 1. Velocity
        if hips_tracked and dt > 0:
            left_speed = self._joint_speed(left_hip, prev_left_hip, dt)
            right_speed = self._joint_speed(right_hip, prev_right_hip, dt)
            avg_speed = (left_speed + right_speed) / 2

            if avg_speed > self.MAX_HIP_SPEED:
                self.velocity_violations += 1
            else:
                self.velocity_violations = max(0, self.velocity_violations - 1)

            if self.velocity_violations > self.MAX_VELOCITY_VIOLATIONS:
                warnings.append(TOO_FAST_WARNING)
                self.velocity_violations = 0

        # 2. Exercise specific
        if exercise_id in self.VALGUS_EXERCISES:
            warnings.extend(self.check_knee_valgus(pose))

        # 3. Struggle: previous speed is taken against the newest history sample
        if hips_tracked and dt > 0:
            prev_sample = self.velocity_history[-1] if self.velocity_history else prev_left_hip
            current_speed = self._joint_speed(left_hip, prev_left_hip, dt)
            previous_speed = self._joint_speed(prev_left_hip, prev_sample, dt)
            acceleration = abs(current_speed - previous_speed)

            avg_speed = (current_speed + self._joint_speed(right_hip, prev_right_hip, dt)) / 2
            if avg_speed < self.STRUGGLE_MAX_SPEED and acceleration > self.STRUGGLE_MIN_ACCELERATION:
                warnings.append(SHAKING_WARNING)

        if left_hip is not None:
            self.velocity_history.append(left_hip)
        self.last_pose = pose
        self.last_timestamp = now

        for warning in warnings:
            logger.warning(f"Safety warning ({exercise_id}): {warning}")

        return warnings

    def check_knee_valgus(self, pose: PoseCoords) -> List[str]:
        """
        2D valgus check: knee drifting inward of the hip-ankle midline.

        Inward is +x for the left leg and -x for the right leg in normalized
        image coordinates.
        """
        warnings = []

        l_hip, l_knee, l_ankle = pose.get("left_hip"), pose.get("left_knee"), pose.get("left_ankle")
        if None not in (l_hip, l_knee, l_ankle):
            l_mid = (l_hip.x + l_ankle.x) / 2
            if l_knee.x - l_mid > self.VALGUS_DEVIATION:
                warnings.append(LEFT_VALGUS_WARNING)

        r_hip, r_knee, r_ankle = pose.get("right_hip"), pose.get("right_knee"), pose.get("right_ankle")
        if None not in (r_hip, r_knee, r_ankle):
            r_mid = (r_hip.x + r_ankle.x) / 2
            if r_mid - r_knee.x > self.VALGUS_DEVIATION:
                warnings.append(RIGHT_VALGUS_WARNING)

        return warnings

    @staticmethod
    def _joint_speed(curr: Landmark, prev: Landmark, dt: float) -> float:
        return float(np.hypot(curr.x - prev.x, curr.y - prev.y)) / dt

    def reset(self):
        self.velocity_history.clear()
        self.last_pose = None
        self.last_timestamp = None
        self.velocity_violations = 0

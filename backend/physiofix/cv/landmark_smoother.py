"""
Velocity-adaptive landmark smoothing.

SMOOTHING STRATEGY:
1. Exponential blend of each landmark with its previous smoothed value
2. Blend factor chosen per landmark from its frame-to-frame displacement:
   - Fast motion: favor the current frame (responsiveness)
   - Near-static: favor the previous value (jitter removal)
   - Otherwise: configured base alpha

The smoother keeps exactly one previous pose. Re-instantiate (or reset)
to start a new stream.
"""

from typing import List, Optional

import numpy as np
import logging

from physiofix.cv.pose import Landmark, Pose, PoseShapeError

logger = logging.getLogger(__name__)


class LandmarkSmoother:
    """
    Adaptive exponential smoother for a stream of poses.

    Features:
    - Per-landmark displacement measured against the previous smoothed pose
    - Alpha switches between fast/static/base regimes
    - Visibility passes through unmodified
    - Fails fast on landmark count changes (never pads or truncates)
    """

    # Displacement thresholds (normalized units per frame)
    FAST_MOTION_THRESHOLD = 0.005  # 0.5% of frame size
    STATIC_THRESHOLD = 0.001

    FAST_ALPHA = 0.8    # Fast movement: responsive
    STATIC_ALPHA = 0.1  # Very still: heavy smoothing

    def __init__(self, alpha: float = 0.5):
        """
        Initialize smoother.

        Args:
            alpha: Base blend factor used between the static and fast regimes
                   (0 = keep previous, 1 = no smoothing)
        """
        self.base_alpha = alpha
        self.prev_pose: Optional[Pose] = None

    def smooth(self, pose: Pose) -> Pose:
        """
        Smooth a pose against the previous smoothed pose.

        Args:
            pose: Raw pose for the current frame

        Returns:
            Smoothed pose (the input itself on the first call)

        Raises:
            PoseShapeError: If the landmark count differs from the previous pose
        """
        if self.prev_pose is None:
            self.prev_pose = pose
            return pose

        if len(pose) != len(self.prev_pose):
            raise PoseShapeError(
                f"Pose has {len(pose)} landmarks, smoother expects {len(self.prev_pose)}"
            )

        smoothed: List[Optional[Landmark]] = []
        for point, prev_point in zip(pose.landmarks, self.prev_pose.landmarks):
            if point is None or prev_point is None:
                smoothed.append(point)
                continue

            displacement = np.sqrt((point.x - prev_point.x) ** 2 + (point.y - prev_point.y) ** 2)
            alpha = self._select_alpha(displacement)

            # prev + alpha * delta returns prev exactly when the landmark did not move
            smoothed.append(Landmark(
                x=prev_point.x + alpha * (point.x - prev_point.x),
                y=prev_point.y + alpha * (point.y - prev_point.y),
                z=prev_point.z + alpha * (point.z - prev_point.z),
                visibility=point.visibility
            ))

        result = Pose(landmarks=tuple(smoothed), timestamp=pose.timestamp)
        self.prev_pose = result
        return result

    def _select_alpha(self, displacement: float) -> float:
        """Pick the blend factor for a landmark's frame-to-frame displacement."""
        if displacement > self.FAST_MOTION_THRESHOLD:
            return self.FAST_ALPHA
        if displacement < self.STATIC_THRESHOLD:
            return self.STATIC_ALPHA
        return self.base_alpha

    def reset(self):
        """Forget the previous pose."""
        self.prev_pose = None

"""Angle and distance primitives shared by the exercise definitions."""

import math
from typing import Any, Optional

import numpy as np


def calculate_angle(a: Optional[Any], b: Optional[Any], c: Optional[Any]) -> float:
    """
    Calculate angle at vertex b formed by points a, b, c (degrees, 0-180).

    Uses the difference of the atan2 bearings of b->c and b->a. A missing
    point yields 0.0, which callers must treat as indeterminate.
    """
    if a is None or b is None or c is None:
        return 0.0

    radians = np.arctan2(c.y - b.y, c.x - b.x) - np.arctan2(a.y - b.y, a.x - b.x)
    angle = abs(float(np.degrees(radians)))

    return 360.0 - angle if angle > 180.0 else angle


def calculate_distance(a: Any, b: Any) -> float:
    """Planar Euclidean distance on (x, y)."""
    return float(np.hypot(a.x - b.x, a.y - b.y))


def round_half_up(value: float) -> int:
    """Round .5 toward +inf, so 89.5 -> 90 and -0.5 -> 0."""
    return int(math.floor(value + 0.5))

"""
Rep counting state machine driven by a single joint-angle signal.

STATES:
- START: At the start position, waiting for the rep to begin
- DESCENDING: Moving toward the peak
- PEAK: At or past the peak threshold
- ASCENDING: Returning toward the start position

TRANSITIONS (mode=min / mode=max):
- START      -> DESCENDING  angle < descend / angle > descend
- DESCENDING -> PEAK        angle < peak / angle > peak
- DESCENDING -> START       angle > start-10 / angle < start+10 (abort, no rep)
- PEAK       -> ASCENDING   angle > peak+15 / angle < peak-15
- ASCENDING  -> START       angle > return / angle < return (REP_COMPLETE)
- ASCENDING  -> PEAK        angle < peak+10 / angle > peak-10 (re-descended)

A re-evaluation less than the debounce window after the previous
transition is a no-op, which suppresses jitter around thresholds.
"""

import time
from enum import Enum
from typing import Callable, Optional
import logging

from physiofix.cv.exercises.base import CountingConfig, CountingMode

logger = logging.getLogger(__name__)


REP_COMPLETE = "REP_COMPLETE"


class WorkoutPhase(str, Enum):
    """Phases of one repetition."""
    START = "START"
    DESCENDING = "DESCENDING"
    PEAK = "PEAK"
    ASCENDING = "ASCENDING"


class WorkoutStateMachine:
    """
    Rep counter for one exercise session.

    Invariants:
    - rep_count never decreases except through reset()
    - rep_count increases by exactly one per START -> ... -> START cycle
    """

    DEBOUNCE_SECONDS = 0.2

    ABORT_MARGIN = 10.0     # Back within this of start without peaking = abort
    ASCENT_BUFFER = 15.0    # Clear of the peak by this much before ascent counts
    REPEAK_MARGIN = 10.0    # Back within this of peak while ascending = re-peak

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        debounce_seconds: Optional[float] = None
    ):
        """
        Initialize state machine.

        Args:
            clock: Time source in seconds, injectable for deterministic tests
            debounce_seconds: Minimum time between transitions
        """
        self._clock = clock
        self.debounce_seconds = self.DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds

        self.current_state = WorkoutPhase.START
        self.rep_count = 0
        # None until the first transition; frame timestamps may use any time base
        self.last_state_change: Optional[float] = None

    def update(
        self,
        angle: float,
        config: Optional[CountingConfig],
        now: Optional[float] = None
    ) -> str:
        """
        Evaluate one angle sample.

        Args:
            angle: Tracked joint angle in degrees
            config: Counting thresholds; None makes this a no-op
            now: Sample time in seconds (defaults to the clock)

        Returns:
            REP_COMPLETE if this sample finished a rep, else the current phase value
        """
        if config is None:
            return self.current_state.value

        if now is None:
            now = self._clock()

        if self.last_state_change is not None and now < self.last_state_change:
            logger.debug(f"Timestamp went back ({self.last_state_change} -> {now}), new time origin")
            self.last_state_change = None

        if self.last_state_change is not None and now - self.last_state_change < self.debounce_seconds:
            return self.current_state.value

        is_min = config.mode == CountingMode.MIN
        peak = config.peak_threshold

        if self.current_state == WorkoutPhase.START:
            is_descending = angle < config.descend_threshold if is_min else angle > config.descend_threshold
            if is_descending:
                self._transition(WorkoutPhase.DESCENDING, now)

        elif self.current_state == WorkoutPhase.DESCENDING:
            is_at_peak = angle < peak if is_min else angle > peak
            is_aborted = (
                angle > config.start_angle - self.ABORT_MARGIN if is_min
                else angle < config.start_angle + self.ABORT_MARGIN
            )

            if is_at_peak:
                self._transition(WorkoutPhase.PEAK, now)
            elif is_aborted:
                logger.debug(f"Rep aborted at {angle:.1f} before reaching peak")
                self._transition(WorkoutPhase.START, now)

        elif self.current_state == WorkoutPhase.PEAK:
            is_ascending = (
                angle > peak + self.ASCENT_BUFFER if is_min
                else angle < peak - self.ASCENT_BUFFER
            )
            if is_ascending:
                self._transition(WorkoutPhase.ASCENDING, now)

        elif self.current_state == WorkoutPhase.ASCENDING:
            is_returned = angle > config.return_threshold if is_min else angle < config.return_threshold
            is_repeaked = (
                angle < peak + self.REPEAK_MARGIN if is_min
                else angle > peak - self.REPEAK_MARGIN
            )

            if is_returned:
                self._transition(WorkoutPhase.START, now)
                self.rep_count += 1
                logger.info(f"Rep complete: {self.rep_count}")
                return REP_COMPLETE
            elif is_repeaked:
                self._transition(WorkoutPhase.PEAK, now)

        return self.current_state.value

    def _transition(self, new_state: WorkoutPhase, now: float):
        logger.debug(f"{self.current_state.value} -> {new_state.value}")
        self.current_state = new_state
        self.last_state_change = now

    def reset(self):
        self.current_state = WorkoutPhase.START
        self.rep_count = 0

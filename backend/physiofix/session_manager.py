"""
Live analysis sessions.

Each session owns one AnalysisPipeline. Sessions never share mutable
state; the manager only maps ids to pipelines and tracks when each was
last used. Sessions idle for longer than the configured TTL are evicted
before the session cap is enforced.
"""

import time
import uuid
import logging
from functools import lru_cache
from typing import Callable, Dict, Optional

from physiofix.config import Settings, get_settings
from physiofix.cv.analysis_pipeline import AnalysisPipeline
from physiofix.storage import CalibrationStore, get_calibration_store

logger = logging.getLogger(__name__)


class SessionLimitError(RuntimeError):
    """Raised when the configured number of concurrent sessions is reached."""


class SessionManager:
    """Creates, looks up, expires and closes analysis sessions."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[CalibrationStore] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        self.settings = settings or get_settings()
        # One store for all sessions so calibration survives across sessions
        self.store = store if store is not None else get_calibration_store(self.settings)
        self._clock = clock
        self.active_sessions: Dict[str, AnalysisPipeline] = {}
        self.last_activity: Dict[str, float] = {}

    def create_session(self, exercise_id: str) -> str:
        self.evict_idle_sessions()
        if len(self.active_sessions) >= self.settings.max_sessions:
            raise SessionLimitError(f"Session limit reached ({self.settings.max_sessions})")

        session_id = str(uuid.uuid4())
        self.active_sessions[session_id] = AnalysisPipeline(
            exercise_id=exercise_id,
            settings=self.settings,
            store=self.store
        )
        self.last_activity[session_id] = self._clock()
        logger.info(f"Session {session_id} created for {exercise_id}")
        return session_id

    def get_session(self, session_id: str) -> Optional[AnalysisPipeline]:
        """Look up a session and mark it as active."""
        pipeline = self.active_sessions.get(session_id)
        if pipeline is not None:
            self.last_activity[session_id] = self._clock()
        return pipeline

    def end_session(self, session_id: str) -> Optional[dict]:
        """Close a session and return its summary (None if unknown)."""
        pipeline = self.active_sessions.pop(session_id, None)
        self.last_activity.pop(session_id, None)
        if pipeline is None:
            return None
        return pipeline.end_session()

    def evict_idle_sessions(self) -> int:
        """
        Close sessions idle for longer than session_ttl_seconds.

        Evicted sessions are ended normally, so a completed calibration is
        still persisted.

        Returns:
            Number of sessions evicted
        """
        now = self._clock()
        ttl = self.settings.session_ttl_seconds
        expired = [sid for sid, seen in self.last_activity.items() if now - seen > ttl]

        for session_id in expired:
            logger.info(f"Session {session_id} idle for more than {ttl}s, evicting")
            self.end_session(session_id)

        return len(expired)


@lru_cache
def get_session_manager() -> SessionManager:
    """Get the process-wide session manager."""
    return SessionManager()

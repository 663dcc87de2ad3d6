"""
Calibration record persistence.

One flat record per exercise, stored under the key
"calibration_<exercise_id>":

    {"restingAngle": 175.0, "peakAngle": 95.0, "rom": 80.0}

Backends:
- InMemoryCalibrationStore: process lifetime only (default, tests)
- JsonFileCalibrationStore: one <key>.json file per exercise
"""

import json
import logging
from pathlib import Path
from typing import Dict, Optional

from physiofix.config import Settings, get_settings
from physiofix.cv.calibration import CalibrationRecord

logger = logging.getLogger(__name__)


class CalibrationStore:
    """Key-value store for calibration records."""

    def __init__(self, key_prefix: str = "calibration_"):
        self.key_prefix = key_prefix

    def key_for(self, exercise_id: str) -> str:
        return f"{self.key_prefix}{exercise_id}"

    def load(self, exercise_id: str) -> Optional[CalibrationRecord]:
        raise NotImplementedError

    def save(self, exercise_id: str, record: CalibrationRecord):
        raise NotImplementedError

    def delete(self, exercise_id: str):
        raise NotImplementedError


class InMemoryCalibrationStore(CalibrationStore):
    """Dictionary-backed store."""

    def __init__(self, key_prefix: str = "calibration_"):
        super().__init__(key_prefix)
        self._records: Dict[str, Dict[str, float]] = {}

    def load(self, exercise_id: str) -> Optional[CalibrationRecord]:
        data = self._records.get(self.key_for(exercise_id))
        return CalibrationRecord.from_dict(data) if data else None

    def save(self, exercise_id: str, record: CalibrationRecord):
        self._records[self.key_for(exercise_id)] = record.to_dict()

    def delete(self, exercise_id: str):
        self._records.pop(self.key_for(exercise_id), None)


class JsonFileCalibrationStore(CalibrationStore):
    """
    Stores each record as <base_dir>/<key>.json.

    Unreadable files are logged and treated as absent so a corrupt record
    never blocks a session.
    """

    def __init__(self, base_dir: str, key_prefix: str = "calibration_"):
        super().__init__(key_prefix)
        self.base_path = Path(base_dir)
        self.base_path.mkdir(parents=True, exist_ok=True)
        logger.info(f"JsonFileCalibrationStore initialized at: {self.base_path}")

    def _path_for(self, exercise_id: str) -> Path:
        return self.base_path / f"{self.key_for(exercise_id)}.json"

    def load(self, exercise_id: str) -> Optional[CalibrationRecord]:
        path = self._path_for(exercise_id)
        if not path.exists():
            return None

        try:
            with open(path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable calibration record {path}: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed calibration record {path}")
            return None

        try:
            return CalibrationRecord.from_dict(data)
        except (TypeError, ValueError) as e:
            logger.warning(f"Ignoring malformed calibration record {path}: {e}")
            return None

    def save(self, exercise_id: str, record: CalibrationRecord):
        path = self._path_for(exercise_id)
        with open(path, "w") as f:
            json.dump(record.to_dict(), f)
        logger.debug(f"Saved calibration record: {path}")

    def delete(self, exercise_id: str):
        self._path_for(exercise_id).unlink(missing_ok=True)


def get_calibration_store(settings: Optional[Settings] = None) -> CalibrationStore:
    """Create the store configured by settings.calibration_store_backend."""
    settings = settings or get_settings()
    if settings.calibration_store_backend == "json":
        return JsonFileCalibrationStore(settings.calibration_dir, settings.calibration_key_prefix)
    return InMemoryCalibrationStore(settings.calibration_key_prefix)

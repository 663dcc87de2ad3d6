"""Application configuration."""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "PhysioFix Motion Core"
    debug: bool = False
    api_prefix: str = "/api"

    # Landmark smoothing
    smoothing_alpha: float = 0.5  # Base blend factor between fast/static regimes

    # Rep counting
    state_debounce_seconds: float = 0.2  # Suppresses jitter-induced state chatter
    default_exercise: str = "squat"
    fallback_exercise: str = "squat"  # Used when auto-classification fails

    # Calibration persistence
    calibration_store_backend: str = "memory"  # "memory" or "json"
    calibration_dir: str = "./calibration"
    calibration_key_prefix: str = "calibration_"

    # Session stats and coaching cues
    calories_per_rep: float = 0.35
    cue_interval_seconds: float = 3.0

    # Sessions
    max_sessions: int = 64
    session_ttl_seconds: float = 900.0  # Idle sessions past this are evicted
    max_safety_flags: int = 500  # Oldest safety flags are dropped beyond this

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

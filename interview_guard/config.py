"""
InterviewGuard Configuration Settings

All detection thresholds and polling cadences are tunable here
(or through environment variables / .env).
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Configuration for the InterviewGuard proctoring service."""

    # API Settings
    APP_NAME: str = "InterviewGuard Service"
    DEBUG: bool = True
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False
    LOG_DIR: str = "logs"

    # Report storage
    REPORTS_DIR: str = "reports"
    DEFAULT_CANDIDATE_NAME: str = "Test Candidate"

    # Gaze classification (fractions of face width)
    GAZE_DISTANCE_THRESHOLD: float = 0.12
    GAZE_RATIO_THRESHOLD: float = 0.7

    # Gaze debouncing
    GAZE_HISTORY_LENGTH: int = 8
    GAZE_MAJORITY: float = 0.6  # fraction of window that must be "away"
    LOOK_AWAY_SECONDS: float = 2.0
    RETURN_LOG_SECONDS: float = 1.0

    # Face presence
    NO_FACE_SECONDS: float = 8.0

    # Prohibited objects
    OBJECT_CONFIDENCE_THRESHOLD: float = 0.6

    # Polling cadence (seconds)
    FACE_POLL_INTERVAL: float = 0.2
    OBJECT_POLL_INTERVAL: float = 0.5

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()

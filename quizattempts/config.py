"""
Configuration management using Pydantic Settings

Everything tunable at deploy time lives here; scoring thresholds that product
policy owns live in services/policy.py and only take overrides from here.
"""
from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    DATABASE_URL: str
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10

    # Redis (quiz cache and event transport)
    REDIS_URL: str = "redis://redis:6379/0"
    CACHE_ENABLED: bool = True
    CACHE_NAMESPACE: str = "quiz_attempts"
    QUIZ_CACHE_TTL: int = 3600  # 1 hour
    EVENTS_REDIS_KEY: str = "quiz_attempts:events"

    # Application
    APP_NAME: str = "Quiz Attempt Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Scoring
    PASSING_PERCENTAGE: float = 70.0
    POINTS_PER_CORRECT: int = 10
    MAX_POINTS_PER_ATTEMPT: int = 1000

    # Logging
    LOG_LEVEL: str = "INFO"

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("PASSING_PERCENTAGE")
    @classmethod
    def validate_passing_percentage(cls, value: float) -> float:
        if not 0 <= value <= 100:
            raise ValueError("PASSING_PERCENTAGE must be between 0 and 100")
        return value

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()

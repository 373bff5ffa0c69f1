"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables (.env file).  Every field
has a default; the engine itself never reads these values directly, the
HTTP layer turns them into engine config objects.
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Project Info
    PROJECT_NAME: str = "PACE training-load estimation and analytics"
    VERSION: str = "0.1.0"
    AUTHORS: List[str] = ["PACE contributors"]

    DEBUG: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    # Training load
    RAMP_RATE_CEILING_PCT: float = Field(8.0, gt=0.0)
    CTL_TIME_CONSTANT: int = Field(42, ge=1)
    ATL_TIME_CONSTANT: int = Field(7, ge=1)

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


# Global settings instance
settings = Settings()

"""
Configuration settings for GridRef.
"""

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Library settings with environment variable support.

    Attributes:
        environment: Deployment environment, drives the default log level
        log_level: Explicit log level (None picks one from the environment)
        json_logs: Whether file logs are written as JSON
        exact_transverse_mercator: Use the elliptic-function Transverse
            Mercator for UTM instead of the 6th order series
        mgrs_precision: Default MGRS precision for convenience conversions
        extra_digits: Additional decimal digits allowed by the text encoders
        batch_log_threshold_ms: Only log batch timings above this duration
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="GRIDREF_",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"

    # Logging settings
    log_level: Optional[str] = None
    json_logs: bool = False
    batch_log_threshold_ms: Optional[float] = Field(default=None, ge=0.0)

    # Projection settings
    exact_transverse_mercator: bool = False

    # Text encoding settings
    mgrs_precision: int = Field(default=5, ge=-1, le=11)
    extra_digits: int = Field(default=0, ge=0)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: Optional[str]) -> Optional[str]:
        """Validate that the log level is a known level name."""
        if v is None:
            return v
        if v.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return v.upper()

    @property
    def is_development(self) -> bool:
        """Whether running in the development environment."""
        return self.environment == "development"

    @property
    def default_log_level(self) -> str:
        """Get the effective log level name."""
        if self.log_level:
            return self.log_level
        return "DEBUG" if self.is_development else "INFO"


# Global settings instance
settings = Settings()

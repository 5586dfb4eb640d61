"""Configuration and settings management using pydantic-settings."""
import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Workflow core settings with environment variable loading."""

    model_config = SettingsConfigDict(
        env_prefix="WORKFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    env: str = Field(default="development", description="Environment name")
    log_level: str = Field(default="INFO", description="Log level")
    log_json: bool = Field(
        default=True,
        description="Emit structured JSON logs instead of plain text",
    )

    # Validation
    validate_node_config: bool = Field(
        default=False,
        description="Validate node configs through the registry when building definitions",
    )

    # Execution limits
    max_steps: int = Field(
        default=1000,
        description="Safety limit on steps a single executor run may take",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the log level name."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("max_steps")
    @classmethod
    def validate_max_steps(cls, v: int) -> int:
        """Validate that the step limit is positive."""
        if v <= 0:
            raise ValueError("max_steps must be positive")
        return v


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (useful for testing)."""
    global _settings
    _settings = None

"""Application configuration from environment variables."""

from typing import Optional

from pydantic import ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        default="sqlite:///./messmate.db",
        description="SQLAlchemy database URL",
    )
    database_echo: bool = Field(default=False, description="Log SQL queries")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level name")
    log_file: str = Field(default="logs/server.log", description="Server log file path")

    # Access control
    admin_subjects: str = Field(
        default="",
        description="Comma-separated identity subjects with super-admin rights",
    )

    # API
    api_title: str = Field(default="MessMate API", description="API title")
    api_version: str = Field(default="0.1.0", description="API version")
    cors_origins: str = Field(default="*", description="Comma-separated allowed origins")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = str(value).strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    def admin_subject_set(self) -> set[str]:
        """Parse ADMIN_SUBJECTS into a set of non-empty subjects."""
        return {s.strip() for s in self.admin_subjects.split(",") if s.strip()}

    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


# Lazy loader so tests and entry points can set the environment first
_settings_instance: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def reset_settings() -> None:
    """Drop the cached settings (re-read environment on next access)."""
    global _settings_instance
    _settings_instance = None


__all__ = ["LOG_LEVELS", "Settings", "get_settings", "reset_settings"]

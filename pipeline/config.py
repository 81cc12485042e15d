"""Pipeline configuration settings."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class PipelineSettings(BaseSettings):
    """Settings for the workflow engine and its integrations."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    ENVIRONMENT: str = "development"  # development, staging, production

    # Claude AI (fallback when the job owner has no key of their own)
    ANTHROPIC_API_KEY: Optional[str] = None
    CLAUDE_MODEL: str = "claude-sonnet-4-5-20250929"
    CLAUDE_MAX_TOKENS: int = 1024

    # S3 (resumes and assignment files)
    S3_BUCKET: str = "hiring-pipeline-uploads"
    S3_REGION: str = "us-east-1"
    S3_PREFIX: str = "uploads/"
    S3_ACCESS_KEY_ID: Optional[str] = None
    S3_SECRET_ACCESS_KEY: Optional[str] = None

    # Email (SES)
    SES_FROM_EMAIL: str = "noreply@example.com"
    SES_FROM_NAME: str = "The Hiring Team"
    SES_REGION: str = "us-east-1"
    SES_ACCESS_KEY_ID: Optional[str] = None
    SES_SECRET_ACCESS_KEY: Optional[str] = None

    # Google Calendar (fallback OAuth client when the recruiter has none stored)
    GOOGLE_CLIENT_ID: Optional[str] = None
    GOOGLE_CLIENT_SECRET: Optional[str] = None
    GOOGLE_TOKEN_URL: str = "https://oauth2.googleapis.com/token"
    GOOGLE_CALENDAR_API_URL: str = "https://www.googleapis.com/calendar/v3"
    CALENDAR_TIMEOUT_SECONDS: float = 15.0

    # Frontend (assignment and booking links)
    FRONTEND_URL: str = "http://localhost:3000"

    # Encryption (Fernet key for stored credentials)
    ENCRYPTION_KEY: Optional[str] = None

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"


@lru_cache
def get_settings() -> PipelineSettings:
    """Get cached settings instance."""
    return PipelineSettings()


settings = get_settings()

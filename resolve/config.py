"""
Configuration management using pydantic-settings and python-dotenv
"""
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",  # Allow extra fields from environment variables
    )

    # Supabase
    SUPABASE_URL: Optional[str] = Field(
        default=None,
        description="Supabase project URL"
    )
    SUPABASE_ANON_KEY: Optional[str] = Field(
        default=None,
        description="Supabase anon key, combined with the caller's JWT"
    )
    SUPABASE_SERVICE_KEY: Optional[str] = Field(
        default=None,
        description="Supabase service role key"
    )

    # AI gateway (OpenAI compatible)
    AI_GATEWAY_URL: str = Field(
        default="https://ai.gateway.lovable.dev/v1",
        description="Base URL of the AI gateway"
    )
    AI_GATEWAY_API_KEY: Optional[str] = Field(
        default=None,
        description="API key for the AI gateway"
    )
    AI_MODEL: str = Field(
        default="google/gemini-2.5-flash",
        description="Model used for every gateway call"
    )
    REQUEST_TIMEOUT: int = Field(
        default=30,
        description="AI gateway request timeout in seconds"
    )

    # Application
    ENVIRONMENT: str = Field(
        default="development",
        description="Application environment"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level"
    )
    SITE_URL: str = Field(
        default="http://localhost:8000",
        description="Public origin used in email confirmation redirects"
    )
    SOUND_ENABLED_DEFAULT: bool = Field(
        default=True,
        description="Default sound preference for dashboard notifications"
    )

    # Attachments
    ATTACHMENTS_BUCKET: str = Field(
        default="complaint-attachments",
        description="Storage bucket for complaint attachments"
    )
    MAX_FILE_SIZE: int = Field(
        default=5 * 1024 * 1024,
        description="Maximum attachment size in bytes"
    )
    MAX_FILES_PER_COMPLAINT: int = Field(
        default=3,
        description="Maximum number of attachments per complaint"
    )
    ALLOWED_FILE_TYPES: List[str] = Field(
        default=["image/jpeg", "image/png", "image/webp", "application/pdf"],
        description="Accepted attachment MIME types"
    )
    SIGNED_URL_TTL: int = Field(
        default=3600,
        description="Lifetime of attachment download links in seconds"
    )

    # Security monitoring
    DETECTION_INTERVAL_SECONDS: int = Field(
        default=300,
        description="Interval between suspicious activity scans, 0 disables"
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Global settings instance
settings = get_settings()

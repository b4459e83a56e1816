# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.DATABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Database Configuration
    # -------------------------------------------------------------------------

    DATABASE_URL: str = Field(
        default="sqlite:///./catalog.db",
        description="SQLAlchemy connection URL (postgresql+psycopg2://... in production)"
    )

    DB_POOL_SIZE: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Connection pool size (ignored for SQLite)"
    )

    DB_ECHO: bool = Field(
        default=False,
        description="Echo SQL statements to the log"
    )

    # -------------------------------------------------------------------------
    # Identity Provider
    # -------------------------------------------------------------------------
    # Tokens are issued by an external provider; we only verify them.

    AUTH_JWT_SECRET: str = Field(
        ...,
        min_length=16,
        description="Shared secret used to verify HS256 tokens"
    )

    AUTH_JWT_ALGORITHM: str = Field(
        default="HS256",
        description="Expected signing algorithm for shared-secret tokens"
    )

    AUTH_JWKS_URL: str | None = Field(
        default=None,
        description="JWKS endpoint for asymmetric provider keys (optional)"
    )

    AUTH_AUDIENCE: str | None = Field(
        default=None,
        description="Required 'aud' claim, if any"
    )

    AUTH_ISSUER: str | None = Field(
        default=None,
        description="Required 'iss' claim, if any"
    )

    ADMIN_EMAILS: str = Field(
        default="",
        description="Emails promoted to administrator on login (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    CORS_ORIGINS: str = Field(
        default="http://localhost:5173",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Package Upload Settings
    # -------------------------------------------------------------------------

    UPLOAD_DIR: str = Field(
        default="downloads",
        description="Flat directory holding uploaded package files"
    )

    MAX_UPLOAD_SIZE_MB: int = Field(
        default=500,
        ge=1,
        le=4096,
        description="Maximum package upload size in MB"
    )

    ALLOWED_EXTENSIONS: str = Field(
        default=".zip",
        description="Allowed package extensions (comma-separated)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS string into a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def allowed_extensions_list(self) -> list[str]:
        """
        Parse ALLOWED_EXTENSIONS string into a list.

        Example: ".zip, .tar.gz" -> [".zip", ".tar.gz"]
        """
        return [ext.strip().lower() for ext in self.ALLOWED_EXTENSIONS.split(",") if ext.strip()]

    @property
    def admin_emails_list(self) -> list[str]:
        return [email.strip().lower() for email in self.ADMIN_EMAILS.split(",") if email.strip()]

    @property
    def max_upload_size_bytes(self) -> int:
        """Convert MB to bytes for file size validation."""
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()

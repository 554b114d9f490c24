"""
Configuration management using pydantic-settings.
Loads configuration from environment variables and .env file.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Database Configuration
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DB_NAME: str = "udyam_registration"
    DATABASE_URL_OVERRIDE: str | None = None  # e.g. sqlite+aiosqlite:///./udyam.db

    # Database Connection Pool Settings (ignored for SQLite)
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20
    DATABASE_POOL_PRE_PING: bool = True
    DATABASE_POOL_RECYCLE: int = 3600
    DATABASE_ECHO: bool = False

    @property
    def DATABASE_URL(self) -> str:
        """Construct database URL from individual components."""
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    # Application Configuration
    APP_NAME: str = "Udyam Registration Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Form schema produced by the scraper
    FORM_SCHEMA_PATH: str = str(PROJECT_ROOT / "config" / "forms" / "udyam_form_schema.json")

    # Demo mode echoes the verification code in the initiate response.
    # Not for production: there is no SMS channel behind it.
    DEMO_MODE: bool = True

    # Scraper
    UDYAM_PORTAL_URL: str = "https://udyamregistration.gov.in/UdyamRegistration.aspx"
    SCRAPER_TIMEOUT: float = 30.0

    @property
    def form_schema_path(self) -> Path:
        """Form schema path as a Path object."""
        return Path(self.FORM_SCHEMA_PATH)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure settings are loaded only once.
    """
    return Settings()


# Global settings instance
settings = get_settings()

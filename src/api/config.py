"""
API configuration settings.

Loads configuration from environment variables and an optional YAML file.
"""

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import Any, Dict, List, Optional
from functools import lru_cache
import yaml
from pathlib import Path

from shared.utils.logger import setup_logger

logger = setup_logger(__name__)


class APISettings(BaseSettings):
    """
    API configuration settings.

    Loaded from environment variables (and .env).
    """

    # API Metadata
    API_TITLE: str = "Udyam Registration API"
    API_DESCRIPTION: str = "Two step MSME registration with schema driven validation"
    API_VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"

    # Server Configuration
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=4000, description="API port")
    ENVIRONMENT: str = Field(default="development", description="Environment (development, staging, production)")
    DEBUG: bool = Field(default=False, description="Debug mode")
    LOG_LEVEL: str = Field(default="INFO", description="Log level")

    # CORS Configuration
    ENABLE_CORS: bool = Field(default=True, description="Enable CORS")
    CORS_ORIGINS: List[str] = Field(
        default=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
        description="Allowed CORS origins (the form frontend)"
    )
    CORS_METHODS: List[str] = Field(default=["*"], description="Allowed HTTP methods")
    CORS_HEADERS: List[str] = Field(default=["*"], description="Allowed headers")

    # Authentication (admin endpoints only)
    ENABLE_AUTH: bool = Field(default=True, description="Require an API key for admin endpoints")
    API_KEY_HEADER: str = Field(default="X-API-Key", description="API key header name")
    API_KEYS: List[str] = Field(default=["dev-key-12345"], description="Valid API keys")

    # Rate Limiting
    ENABLE_RATE_LIMIT: bool = Field(default=True, description="Enable rate limiting")
    RATE_LIMIT_REQUESTS: int = Field(default=100, description="Max requests per window")
    RATE_LIMIT_WINDOW: int = Field(default=15 * 60, description="Rate limit window in seconds")
    TRUST_PROXY_HEADERS: bool = Field(
        default=False,
        description="Identify clients by the first X-Forwarded-For hop (only behind a trusted proxy)",
    )

    # Documentation
    ENABLE_DOCS: bool = Field(default=True, description="Enable API documentation")

    # Pagination
    DEFAULT_PAGE_SIZE: int = Field(default=50, description="Default pagination size")
    MAX_PAGE_SIZE: int = Field(default=500, description="Maximum pagination size")

    # Create tables on startup (local SQLite setups; use Alembic otherwise)
    AUTO_CREATE_TABLES: bool = Field(default=False, description="Create tables on startup")

    @field_validator('CORS_ORIGINS', 'CORS_METHODS', 'CORS_HEADERS', 'API_KEYS', mode='before')
    @classmethod
    def split_string_to_list(cls, value):
        """Convert comma-separated string to list."""
        if isinstance(value, str):
            return [item.strip() for item in value.split(',') if item.strip()]
        return value

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


@lru_cache()
def get_api_settings() -> APISettings:
    """
    Get cached API settings instance.

    Values from config/api_config.yaml, when present, override the
    environment.

    Returns:
        APISettings instance
    """
    return APISettings(**load_api_config_from_yaml())


def load_api_config_from_yaml(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load additional API configuration from YAML file.

    Args:
        config_path: Optional path to config file

    Returns:
        Configuration dictionary (empty if the file is absent or unreadable)
    """
    if config_path is None:
        config_path = Path(__file__).parent.parent.parent / "config" / "api_config.yaml"

    path = Path(config_path)
    if not path.exists():
        return {}

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not load API config from YAML: {e}")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Ignoring API config {path}: expected a mapping")
        return {}
    return data

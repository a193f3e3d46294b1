"""
API configuration settings.
"""

from pydantic_settings import BaseSettings


class APIConfig(BaseSettings):
    """API configuration settings."""

    # API Settings
    api_title: str = "Library Catalog API"
    api_version: str = "1.0.0"
    api_description: str = "CRUD service for books and their authors"

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = False
    access_log: bool = False  # request logging is done by the app middleware

    # Static assets served at the site root
    static_dir: str = "public"

    # Logging
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "extra": "ignore"  # Ignore extra fields from .env
    }


# Global config instance
config = APIConfig()

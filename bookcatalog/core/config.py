"""
Application configuration using Pydantic settings
"""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings from environment variables"""

    # Application
    PROJECT_NAME: str = "Bookstore Catalog Integrity API"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = True
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    WORKERS: int = 1

    # Logging
    log_level: str = "INFO"

    # Catalog service (remote bookstore backend)
    catalog_api_url: str = "http://localhost:5000/api"
    catalog_api_token: Optional[str] = None
    catalog_api_timeout: float = 30.0

    # Format file rules
    max_format_file_bytes: int = 6 * 1024 * 1024  # 6MB
    ebook_content_types: List[str] = ["application/pdf"]
    audiobook_content_prefix: str = "audio/"

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = []

    # Product defaults
    default_language: str = "fa"
    currency_label: str = "تومان"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()

"""
Configuration and settings for the blog backend.

Process settings come from the environment. Site settings editable at
runtime live in the database and are handled by ``config_store``.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="")
    log_level: str = Field(default="INFO")

    # Database (Postgres expected, any SQLAlchemy URL works)
    database_url: Optional[str] = Field(default=None)

    # Cache (Redis). Without a URL an in-process cache is used.
    redis_url: Optional[str] = Field(default=None)
    cache_prefix: str = Field(default="blog:")

    # Token verification
    jwt_secret: Optional[str] = Field(default=None)
    jwt_algorithm: str = Field(default="HS256")

    # S3-compatible storage
    s3_endpoint: Optional[str] = Field(default=None)
    s3_region: str = Field(default="auto")
    s3_bucket: Optional[str] = Field(default=None)
    s3_folder: str = Field(default="images/")
    s3_access_key_id: Optional[str] = Field(default=None)
    s3_secret_access_key: Optional[str] = Field(default=None)
    s3_force_path_style: bool = Field(default=False)
    s3_access_host: Optional[str] = Field(default=None)

    # AI providers used by the config test endpoint
    gemini_api_key: Optional[str] = Field(default=None)
    ai_request_timeout: float = Field(default=30.0)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()

"""Validator configuration via environment variables."""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Validator settings loaded from environment variables."""

    # Traversal
    DETECT_CYCLES: bool = True

    # Metadata scanning
    CACHE_METADATA: bool = True

    # Logging
    LOG_LEVEL: str = "info"
    LOG_JSON: bool = False

    model_config = {"env_prefix": "OBJVALIDATOR_", "env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()

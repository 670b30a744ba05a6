"""
Application configuration management.
"""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables (prefixed with POLYAST_)."""

    # Logging
    log_level: str = "INFO"

    # Tree construction
    max_node_text_length: int = 1000
    include_anonymous_nodes: bool = False

    # Overrides the built-in parsers/config.yaml language table
    languages_config_path: Optional[Path] = None

    model_config = SettingsConfigDict(
        env_prefix="POLYAST_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()

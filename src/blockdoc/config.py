"""
Application configuration management.

Values come from BLOCKDOC_-prefixed environment variables or a .env file,
e.g. BLOCKDOC_HISTORY_MAX_ENTRIES=100.
"""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service, parser, export and history configuration."""

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: List[str] = ["*"]
    max_upload_size_mb: int = 10

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Structural parser: explicit table width >= this marks a layout table
    layout_table_min_width_px: int = 300

    # Export
    export_size_warning_kb: int = 200
    export_title: str = "Agreement Form"

    # History
    history_max_entries: int = 50
    history_debounce_ms: int = 400

    model_config = SettingsConfigDict(
        env_prefix="BLOCKDOC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()

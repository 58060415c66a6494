"""Configuration management via environment variables."""

from pydantic_settings import BaseSettings
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # Delivered artifacts
    export_dir: str = Field(
        default="./exports",
        description="Directory where rendered exports are written when persisted"
    )
    persist_exports: bool = Field(
        default=False,
        description="Also write every delivered PNG/PDF to export_dir"
    )

    # Asset loading
    asset_load_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Maximum time to wait for the snapshot and watermark loads"
    )

    # Input limits
    max_canvas_dimension: int = Field(
        default=10000,
        description="Maximum canvas width/height in pixels"
    )
    max_snapshot_bytes: int = Field(
        default=20 * 1024 * 1024,  # 20 MB
        description="Maximum decoded size of a client snapshot"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

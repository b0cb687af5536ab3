"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    mural_env: str = "development"
    mural_log_level: str = "info"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Mural client
    store_url: str = "http://127.0.0.1:8000"
    user_id_file: str = ".mural_user_id"
    poll_entries_seconds: float = 3.0
    poll_resonances_seconds: float = 2.0
    frames_per_second: float = 60.0

    # Drawing surface (logical pixels)
    viewport_width: float = 800.0
    viewport_height: float = 600.0
    device_pixel_ratio: float = 1.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()

"""Application configuration via environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "Meeting Series"
    debug: bool = False
    log_dir: Path = Path.home() / ".logs" / "meeting_series"

    # Server
    allowed_origins: str = "*"  # Comma-separated origins, or "*" for all

    # Database
    database_url: str = "sqlite:///./meeting_series.db"

    # Series rules
    max_series_occurrences: int = 52
    series_lock_timeout_seconds: float = 10.0


settings = Settings()

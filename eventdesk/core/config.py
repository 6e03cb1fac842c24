"""Application configuration via environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "Event Desk"
    debug: bool = False
    log_dir: Path = Path.home() / ".logs" / "eventdesk"

    # Server
    allowed_origins: str = "*"  # Comma-separated origins, or "*" for all

    # Remote Event Service
    event_service_url: str = ""  # Empty disables the remote path entirely
    event_service_token: str = ""  # Credential used by the background sync job
    request_timeout_seconds: float = 15.0

    # Sync settings
    sync_interval_minutes: int = 5
    seed_baseline_events: bool = True

    # Registration and statistics policy
    enforce_capacity: bool = True
    default_average_attendance: float = 85.0


settings = Settings()

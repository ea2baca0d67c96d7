"""Configuration from environment."""

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Store and local API settings from env."""

    model_config = SettingsConfigDict(env_prefix="EDITORSTORE_", extra="ignore")

    # Storage
    db_path: Path = Path.home() / ".local" / "share" / "editorstore" / "editorstore.db"

    # Local API
    host: str = "127.0.0.1"
    port: int = 8090

    # CORS: comma-separated string in env (e.g. http://localhost:3000)
    # so pydantic-settings does not try to JSON-decode it
    cors_origins: str = "http://localhost:3000"

    @property
    def cors_origins_list(self) -> List[str]:
        """CORS origins as a list (split on comma)."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()] or [
            "http://localhost:3000"
        ]

    # Logging (empty log_file = stderr only; level DEBUG|INFO|WARNING|ERROR)
    log_level: str = "INFO"
    log_file: str = ""


def get_settings() -> Settings:
    """Return application settings."""
    return Settings()

"""Application settings using pydantic-settings."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_prefix="REQSMITH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    history_file: Path = Path.home() / ".reqsmith" / "history.json"
    history_limit: int = 20
    pin_limit: int = 5
    ws_log_limit: int = 500


# Global settings instance
settings = Settings()

"""
Configuration settings for the LeetCode Tracker.
All sensitive values are loaded from environment variables.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "LeetCode Tracker"
    debug: bool = False
    environment: str = "production"

    # Server (health endpoint)
    host: str = "0.0.0.0"
    port: int = 8000

    # Database (SQLite by default, PostgreSQL via postgres:// URLs)
    database_url: str = "sqlite+aiosqlite:///./leetcode_tracker.db"
    database_echo: bool = False
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 1800

    # Discord
    discord_bot_token: Optional[str] = None
    discord_api_base: str = "https://discord.com/api/v10"
    discord_request_timeout: float = 15.0

    # LeetCode
    leetcode_graphql_url: str = "https://leetcode.com/graphql"
    leetcode_request_timeout: float = 15.0

    # Scheduler Settings
    timezone: str = "UTC"

    # Activity monitor
    poll_initial_delay_seconds: int = 15
    poll_interval_seconds: int = 300
    poll_submission_limit: int = Field(default=10, ge=1, le=20)
    poll_request_delay_seconds: float = 2.0

    # Daily recap / streak nudge
    report_tick_seconds: int = 60
    recap_window_start_hour: int = Field(default=9, ge=0, le=23)
    recap_window_end_hour: int = Field(default=12, ge=1, le=24)
    nudge_window_start_hour: int = Field(default=20, ge=0, le=23)
    nudge_window_end_hour: int = Field(default=23, ge=1, le=24)
    nudge_request_delay_seconds: float = 1.0
    recap_top_n: int = 10


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the application settings."""
    return settings

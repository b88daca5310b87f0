"""Application settings and configuration management."""
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Beds24Settings(BaseSettings):
    """Beds24 API v2 configuration."""

    base_url: str = "https://api.beds24.com/v2"
    read_token: str = ""  # Permanent token, used for every GET
    write_refresh_token: str = ""  # Exchanged for short-lived write tokens
    request_timeout: float = 30.0
    deadline_seconds: float = 45.0  # Hard ceiling per upstream call

    # Write token cache: expiry is stored early by the margin, and a cached
    # token is only reused while more than the minimum validity remains.
    token_refresh_margin_seconds: int = 60
    token_min_validity_seconds: int = 300

    model_config = SettingsConfigDict(env_prefix="BEDS24_")


class PropertySettings(BaseSettings):
    """Single property scope."""

    property_id: int = 279646
    timezone: str = "Asia/Dhaka"  # GMT+6, every civil date is anchored here
    default_total_rooms: int = 45

    model_config = SettingsConfigDict(env_prefix="PROPERTY_")


class PaginationSettings(BaseSettings):
    """Pagination walker configuration."""

    page_delay_ms: int = 50
    default_max_pages: int = 50

    model_config = SettingsConfigDict(env_prefix="PAGINATION_")

    @property
    def page_delay_seconds(self) -> float:
        """Delay between page requests, in seconds."""
        return self.page_delay_ms / 1000


class RedisSettings(BaseSettings):
    """Redis configuration for dashboard state and notification audit rows."""

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    ssl: bool = False
    socket_timeout: int = 5
    socket_connect_timeout: int = 5
    key_prefix: str = "bookings-hub"

    model_config = SettingsConfigDict(env_prefix="REDIS_")


class StreamSettings(BaseSettings):
    """Live notification stream configuration."""

    heartbeat_seconds: float = 30.0
    queue_size: int = 100  # Per subscriber; a full queue drops the subscriber

    model_config = SettingsConfigDict(env_prefix="STREAM_")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "json"

    model_config = SettingsConfigDict(env_prefix="LOG_")


class Settings(BaseSettings):
    """Main application settings."""

    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8080
    cors_origins: list[str] = ["*"]
    notification_retention_days: int = 7

    # Sub-settings
    beds24: Beds24Settings = Beds24Settings()
    property: PropertySettings = PropertySettings()
    pagination: PaginationSettings = PaginationSettings()
    redis: RedisSettings = RedisSettings()
    stream: StreamSettings = StreamSettings()
    logging: LoggingSettings = LoggingSettings()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    def validate_credentials(self) -> list[str]:
        """Validate Beds24 credentials. Returns list of missing var names."""
        missing = []
        if not self.beds24.read_token.strip():
            missing.append("BEDS24_READ_TOKEN")
        if not self.beds24.write_refresh_token.strip():
            missing.append("BEDS24_WRITE_REFRESH_TOKEN")
        return missing


# Global settings instance
settings = Settings()

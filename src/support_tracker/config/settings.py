"""Application settings and configuration management using Pydantic."""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Main application settings combining all configuration sections."""

    # Environment and deployment
    environment: str = "development"
    debug: bool = False

    # Refresh settings
    refresh_enabled: bool = True
    refresh_interval_seconds: float = 10.0
    refresh_initial_delay_seconds: float = 5.0
    scheduler_max_workers: int = 2

    # Watchlist settings
    max_tracked_symbols: int = 0  # 0 means unlimited

    # Store settings
    store_backend: str = "database"  # 'database' or 'json'
    json_store_path: str = "data/stocks.json"

    # API settings
    endpoint_host: str = "0.0.0.0"
    endpoint_port: int = 3000
    api_log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    # Database settings
    database_url: Optional[str] = None
    data_directory: str = "data"
    database_echo_sql: bool = False
    database_pool_pre_ping: bool = True
    database_pool_recycle: int = 3600

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "structured"  # 'structured' or 'plain'
    log_file_enabled: bool = False
    log_file_path: str = "data/support_tracker.log"
    log_max_file_size: str = "10MB"
    log_backup_count: int = 5

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting."""
        valid_environments = ["development", "testing", "production"]
        if v.lower() not in valid_environments:
            raise ValueError(f"Environment must be one of: {valid_environments}")
        return v.lower()

    @field_validator("refresh_interval_seconds")
    @classmethod
    def validate_interval(cls, v):
        """Validate the refresh interval is reasonable."""
        if v < 1 or v > 86400:
            raise ValueError("Refresh interval must be between 1 and 86400 seconds")
        return v

    @field_validator("refresh_initial_delay_seconds")
    @classmethod
    def validate_initial_delay(cls, v):
        if v < 0:
            raise ValueError("Initial refresh delay cannot be negative")
        return v

    @field_validator("max_tracked_symbols", "scheduler_max_workers")
    @classmethod
    def validate_non_negative(cls, v):
        if v < 0:
            raise ValueError("Value cannot be negative")
        return v

    @field_validator("store_backend")
    @classmethod
    def validate_store_backend(cls, v):
        """Validate store backend."""
        valid_backends = ["database", "json"]
        if v.lower() not in valid_backends:
            raise ValueError(f"Store backend must be one of: {valid_backends}")
        return v.lower()

    @field_validator("endpoint_port")
    @classmethod
    def validate_port(cls, v):
        """Validate port number is in valid range."""
        if v < 1 or v > 65535:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @field_validator("log_level", "api_log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        """Validate log format."""
        valid_formats = ["structured", "plain"]
        if v.lower() not in valid_formats:
            raise ValueError(f"Log format must be one of: {valid_formats}")
        return v.lower()

    def get_database_url(self) -> str:
        """Get the complete database URL."""
        if self.database_url:
            return self.database_url

        # Default to SQLite in data directory
        db_dir = Path(self.data_directory)
        db_dir.mkdir(parents=True, exist_ok=True)
        db_path = db_dir / "support_tracker.db"
        return f"sqlite:///{db_path}"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application configuration instance
    """
    return Settings()

"""Application configuration settings."""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database Configuration
    db_host: str = "localhost"
    db_port: int = 3306
    db_user: str = "sqlite"
    db_password: str = ""
    db_name: str = "care_reminders"
    db_pool_size: int = 10
    db_max_overflow: int = 20
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600
    db_connect_timeout: int = 5

    # LINE Bot Configuration
    line_channel_access_token: str = ""
    line_api_timeout: int = 10

    # Application Settings
    debug: bool = False
    log_level: str = "INFO"
    api_prefix: str = "/api"
    api_version: str = "v1"

    # Poller Settings
    poller_enabled: bool = True
    poll_interval_seconds: int = 60
    auto_dismiss_after_missed_ticks: Optional[int] = None

    # Query Settings
    default_page_size: int = 50
    max_page_size: int = 200

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def database_url(self) -> str:
        """Construct database URL from configuration."""
        # Use SQLite if DB_USER is 'sqlite'
        if self.is_sqlite:
            return f"sqlite:///./{self.db_name}.db"
        return f"mysql+pymysql://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    @property
    def is_sqlite(self) -> bool:
        """Check if the configured database is a local SQLite file."""
        return self.db_user.lower() == 'sqlite'

    @property
    def reminders_prefix(self) -> str:
        """URL prefix for the reminder routes."""
        return f"{self.api_prefix}/{self.api_version}/reminders"


# Global settings instance
settings = Settings()

"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="BNPL_",
        extra="ignore",
    )

    # Database (single local file, one user)
    database_url: str = "sqlite:///./bnpl_tracker.db"
    db_echo: bool = False

    # Service
    service_name: str = "bnpl-tracker"
    log_level: str = "INFO"

    # Transaction listing
    page_size: int = 10


settings = Settings()

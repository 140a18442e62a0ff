"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./license_ledger.db"
    auto_create_tables: bool = True

    # Service
    service_name: str = "license-ledger"
    log_level: str = "INFO"
    environment: str = "production"  # "development" enables the mock admin user

    # Reporting
    currency: str = "NOK"
    billing_days_ahead: int = 30
    unknown_category_label: str = "Unknown"


settings = Settings()

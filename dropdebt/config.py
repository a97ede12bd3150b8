"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service configuration loaded from environment variables.

    Only the API and infrastructure layers read this; domain functions take
    every tunable as an explicit argument.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="DROPDEBT_", extra="ignore"
    )

    # Database
    database_url: str = "sqlite:///./dropdebt.db"

    # Service
    service_name: str = "dropdebt-engine"
    log_level: str = "INFO"

    # Engine defaults passed into the domain layer
    typical_bill_amount: float = 200.0
    default_triage_strategy: str = "BALANCED"


settings = Settings()

"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # External Services
    lookup_api_base: str = "http://localhost:8001"
    scoring_api_base: str = ""  # empty: no remote scoring service
    scoring_use_local_optimizer: bool = True

    # Service
    service_name: str = "payplan-gateway"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0


settings = Settings()

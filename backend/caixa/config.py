"""
Application configuration using Pydantic settings.
"""

import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from typing import Optional


class Settings(BaseSettings):
    """Application settings."""

    # App
    app_name: str = "Caixa"
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./data/caixa.sqlite"
    db_timeout_seconds: int = 15

    # Auth
    jwt_secret: Optional[str] = None  # Random throwaway secret when unset
    access_token_expire_hours: int = 72
    refresh_token_expire_days: int = 7
    bcrypt_rounds: int = Field(12, ge=10)

    # Rate limiting, requests per window per client
    rate_limit_enabled: bool = True
    rate_limit_window_seconds: int = 60
    rate_limit_auth: int = 20
    rate_limit_strict: int = 10
    rate_limit_moderate: int = 30
    rate_limit_heavy: int = 5

    # CNPJ lookup
    cnpj_api_url: str = "https://brasilapi.com.br/api/cnpj/v1"
    cnpj_timeout_seconds: float = 10.0

    # Server
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    frontend_url: str = "http://localhost:5173"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()


def configure_logging(level: str) -> None:
    """Root logging setup shared by the API and the batch jobs."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

"""Application configuration."""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables (OKX_ prefix)."""

    model_config = SettingsConfigDict(
        env_prefix="OKX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # OKX public market data (no authentication needed)
    base_url: str = "https://app.okx.com"
    request_timeout: float = 30.0
    calls_per_minute: int = 600

    # Request defaults
    default_inst_id: str = "BTC-USDT"
    default_bar: str = "1H"
    default_limit: int = 100
    max_limit: int = 300

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

"""Application configuration."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from signal_core.models import DEFAULT_TIMEZONE


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Ensemble thresholds (override the YAML file when set)
    min_confidence: float | None = None
    min_detector_agreement: int | None = None

    # Optional YAML file with weights, time-of-day table and detector params
    ensemble_config: str = ""

    # Risk account
    account_balance: float = 1000.0
    risk_percent: float = 2.0

    # Local time used for the time-of-day multiplier
    timezone: str = DEFAULT_TIMEZONE

    target_symbols: list[str] = [
        "BTCUSDT", "ETHUSDT", "BNBUSDT", "SOLUSDT", "XRPUSDT",
        "ADAUSDT", "MATICUSDT", "LINKUSDT", "DOTUSDT", "AVAXUSDT",
    ]

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

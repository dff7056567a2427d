from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SeniorityTier(BaseModel):
    """Vacation days granted from ``min_years`` of completed service onward."""

    min_years: int = Field(ge=0)
    days: int = Field(ge=0)


# Federal labor law schedule (LFT Art. 76 as amended in 2023).
DEFAULT_SENIORITY_SCHEDULE = [
    SeniorityTier(min_years=0, days=12),
    SeniorityTier(min_years=1, days=14),
    SeniorityTier(min_years=2, days=16),
    SeniorityTier(min_years=3, days=18),
    SeniorityTier(min_years=4, days=20),
    SeniorityTier(min_years=5, days=22),
    SeniorityTier(min_years=10, days=24),
    SeniorityTier(min_years=15, days=26),
    SeniorityTier(min_years=20, days=28),
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Leave Ledger"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    database_url: str = "postgresql+asyncpg://leave_ledger:leave_ledger@db:5432/leave_ledger"
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]
    log_level: str = "INFO"

    # Weekly rest days as ``date.weekday()`` numbers (Monday=0). Sunday only by default.
    rest_weekdays: list[int] = [6]
    first_period_months: int = 6
    seniority_schedule: list[SeniorityTier] = DEFAULT_SENIORITY_SCHEDULE
    sweep_interval_seconds: int = 86400

    db_pool_size: int = 5
    db_max_overflow: int = 10


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings

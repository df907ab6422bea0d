"""
config.py: pydantic-settings Settings class.

All environment variables for the agency directory are declared here.
The API imports `settings` from this module.

Usage:
    from agencydir_shared.config import settings
    print(settings.supabase_url)
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_dotenv() -> Path | None:
    """Walk up from CWD to find the nearest .env file."""
    current = Path.cwd()
    for parent in [current, *current.parents]:
        candidate = parent / ".env"
        if candidate.is_file():
            return candidate
    return None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_find_dotenv() or ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Supabase
    # -------------------------------------------------------------------------
    supabase_url: str = Field(default="")
    supabase_anon_key: str = Field(default="")

    # -------------------------------------------------------------------------
    # API server
    # -------------------------------------------------------------------------
    environment: Literal["development", "test", "production"] = Field(
        default="development"
    )
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    cors_origins: str = Field(default="http://localhost:3000")

    # -------------------------------------------------------------------------
    # Listing query bounds
    # -------------------------------------------------------------------------
    default_limit: int = Field(default=20, ge=1)
    max_limit: int = Field(default=100, ge=1)
    max_trade_filters: int = Field(default=10, ge=1)
    max_state_filters: int = Field(default=10, ge=1)
    max_search_length: int = Field(default=100, ge=1)

    # Seconds a successful listing response may be cached by clients
    cache_max_age: int = Field(default=300, ge=0)

    # -------------------------------------------------------------------------
    # Data store retries (seconds)
    # -------------------------------------------------------------------------
    retry_max_attempts: int = Field(default=3, ge=1)
    retry_initial_delay: float = Field(default=1.0, ge=0)
    retry_backoff_multiplier: float = Field(default=1.5, ge=1)
    db_query_timeout: float = Field(default=5.0, gt=0)
    db_retry_total_timeout: float = Field(default=15.0, gt=0)

    # -------------------------------------------------------------------------
    # Performance budget (milliseconds)
    # -------------------------------------------------------------------------
    perf_target_ms: float = Field(default=100.0, gt=0)
    perf_warning_ratio: float = Field(default=0.8, gt=0, le=1)
    slow_query_ms: float = Field(default=50.0, gt=0)
    critical_response_ms: float = Field(default=1000.0, gt=0)

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    log_format: Literal["json", "console"] = Field(default="console")

    # -------------------------------------------------------------------------
    # Derived / computed
    # -------------------------------------------------------------------------
    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def perf_warning_ms(self) -> float:
        return self.perf_target_ms * self.perf_warning_ratio

    @field_validator("supabase_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/") if isinstance(v, str) else v


# ---------------------------------------------------------------------------
# Module-level singleton, import this everywhere
# ---------------------------------------------------------------------------
settings = Settings()

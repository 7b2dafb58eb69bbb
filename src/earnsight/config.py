"""Application configuration via pydantic-settings."""

import json
from functools import lru_cache
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from earnsight.core.constants import (
    DEFAULT_API_BASE_URL,
    DEFAULT_FINNHUB_API_URL,
    DEFAULT_FMP_API_URL,
    DEFAULT_MARKET_TIMEZONE,
    DEFAULT_SERPER_URL,
    DEFAULT_SP500_CSV_URL,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    # Core
    env: Literal["development", "staging", "production"] = Field(
        default="development", alias="EARNSIGHT_ENV"
    )
    debug: bool = Field(default=False, alias="EARNSIGHT_DEBUG")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="EARNSIGHT_LOG_LEVEL"
    )

    # Mock mode bypasses every network call and serves synthetic data
    mock_mode: bool = Field(default=True, alias="EARNSIGHT_MOCK_MODE")
    mock_seed: int | None = Field(
        default=None,
        description="Seed for synthetic data (None = different data every run)",
    )

    # Upstream market data (gateway side)
    data_provider: Literal["finnhub", "fmp"] = Field(default="finnhub")
    finnhub_api_key: SecretStr | None = Field(default=None)
    finnhub_api_url: str = Field(default=DEFAULT_FINNHUB_API_URL)
    fmp_api_key: SecretStr | None = Field(default=None)
    fmp_api_url: str = Field(default=DEFAULT_FMP_API_URL)
    gateway_batch_limit: int = Field(
        default=30,
        ge=1,
        description="Max symbols per POST /batch-quotes (free tier 30-60 calls/min)",
    )
    sp500_csv_url: str = Field(default=DEFAULT_SP500_CSV_URL)

    # Gateway client (pipeline side)
    api_base_url: str = Field(default=DEFAULT_API_BASE_URL)
    api_key: SecretStr | None = Field(default=None)
    api_timeout: float = Field(default=30.0, gt=0)
    api_retry_attempts: int = Field(default=3, ge=0)
    api_retry_delay: float = Field(default=1.0, ge=0)

    # Batch quote fetching
    quote_fetch_mode: Literal["batch", "per_symbol"] = Field(default="batch")
    quote_chunk_size: int = Field(default=5, ge=1)
    quote_chunk_delay: float = Field(
        default=0.5,
        ge=0,
        description="Seconds to wait between sequential quote chunks",
    )
    history_days: int = Field(default=30, ge=1)

    # Session clock
    market_timezone: str = Field(
        default=DEFAULT_MARKET_TIMEZONE,
        description="IANA timezone the exchange session hours are read in",
    )

    @field_validator("market_timezone")
    @classmethod
    def check_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError, OSError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    # Fallback membership list used when the S&P 500 CSV cannot be loaded
    sp500_fallback_symbols: list[str] = Field(default_factory=list)

    @field_validator("sp500_fallback_symbols", mode="before")
    @classmethod
    def parse_symbol_list(cls, v: str | list[str] | None) -> list[str]:
        if v is None:
            return []
        if isinstance(v, str):
            v = v.strip()
            if v.startswith("["):
                v = json.loads(v)
            else:
                v = [s.strip() for s in v.split(",") if s.strip()]
        return [s.upper() for s in v]

    # Report analysis
    serper_api_key: SecretStr | None = Field(default=None)
    serper_url: str = Field(default=DEFAULT_SERPER_URL)
    report_min_chars: int = Field(
        default=500,
        description="Reports shorter than this after HTML stripping are rejected",
    )

    # LLM Provider
    llm_provider: Literal["anthropic", "openai"] = Field(default="anthropic")
    anthropic_api_key: SecretStr | None = Field(default=None)
    openai_api_key: SecretStr | None = Field(default=None)
    # OpenAI-compatible base URL (Gemini, ZAI, local servers)
    openai_base_url: str | None = Field(default=None)
    llm_model: str = Field(default="claude-3-5-haiku-20241022")

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    def upstream_api_key(self) -> str | None:
        """Return the API key of the configured upstream data provider."""
        secret = self.finnhub_api_key if self.data_provider == "finnhub" else self.fmp_api_key
        return secret.get_secret_value() if secret else None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

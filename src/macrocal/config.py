from __future__ import annotations

from typing import Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_QUERIES = (
    "FOMC meeting date",
    "Federal Reserve meeting schedule",
    "CPI release date inflation report",
    "PPI producer price index report",
    "JOLTS job openings report date",
    "University of Michigan consumer sentiment",
    "retail sales report date",
    "consumer confidence index release",
    "Non-Farm Payrolls jobs report",
    "GDP release date",
    "ISM manufacturing PMI report",
)

TRUSTED_SOURCES = (
    "bloomberg",
    "reuters",
    "cnbc",
    "marketwatch",
    "yahoo finance",
    "the wall street journal",
    "financial times",
    "investing.com",
    "barrons",
)


class Settings(BaseSettings):
    """Application settings with validation.

    All settings are loaded from environment variables (or a local .env).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # NewsAPI
    news_api_key: str = ""
    news_api_base_url: str = "https://newsapi.org/v2"
    news_language: str = "en"
    news_page_size: int = 20
    news_lookback_days: int = 7
    request_timeout: float = 10.0

    # Calendar
    cache_ttl_hours: float = 24.0
    search_queries: str = ",".join(DEFAULT_QUERIES)  # Comma-separated
    trusted_sources: str = ",".join(TRUSTED_SOURCES)  # Comma-separated

    log_level: str = "INFO"

    @field_validator("news_page_size")
    @classmethod
    def page_size_range(cls, v: int) -> int:
        if v < 1 or v > 100:
            raise ValueError(f"news_page_size must be in [1, 100], got {v}")
        return v

    @field_validator("news_lookback_days")
    @classmethod
    def lookback_range(cls, v: int) -> int:
        if v < 1 or v > 30:
            raise ValueError(f"news_lookback_days must be in [1, 30], got {v}")
        return v

    @field_validator("request_timeout", "cache_ttl_hours")
    @classmethod
    def must_be_positive(cls, v: float, info) -> float:
        if v <= 0:
            raise ValueError(f"{info.field_name} must be > 0, got {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def valid_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return level

    @property
    def search_queries_list(self) -> list[str]:
        return [q.strip() for q in self.search_queries.split(",") if q.strip()]

    @property
    def trusted_sources_list(self) -> list[str]:
        return [s.strip().lower() for s in self.trusted_sources.split(",") if s.strip()]

    @property
    def cache_ttl_seconds(self) -> float:
        return self.cache_ttl_hours * 3600

    def validate_news_api_credentials(self) -> None:
        """Raise if the NewsAPI key is missing."""
        if not self.news_api_key:
            raise ValueError("NEWS_API_KEY must be set")


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Force reload settings from environment."""
    global _settings
    _settings = Settings()
    return _settings

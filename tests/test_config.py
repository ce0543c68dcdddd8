"""Tests for configuration validation."""
import os
import pytest
from unittest.mock import patch

from macrocal.config import DEFAULT_QUERIES, TRUSTED_SOURCES, Settings


class TestSettingsValidation:
    """Tests for Settings validation."""

    def test_default_values(self):
        """Test that default values are set correctly."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.news_api_key == ""
        assert settings.news_api_base_url == "https://newsapi.org/v2"
        assert settings.news_language == "en"
        assert settings.news_page_size == 20
        assert settings.news_lookback_days == 7
        assert settings.cache_ttl_hours == 24
        assert settings.search_queries_list == list(DEFAULT_QUERIES)
        assert settings.trusted_sources_list == list(TRUSTED_SOURCES)

    def test_page_size_range(self):
        with pytest.raises(ValueError, match="must be in"):
            Settings(news_page_size=0)

        with pytest.raises(ValueError, match="must be in"):
            Settings(news_page_size=101)

    def test_lookback_range(self):
        with pytest.raises(ValueError, match="must be in"):
            Settings(news_lookback_days=0)

    def test_positive_floats(self):
        with pytest.raises(ValueError, match="must be > 0"):
            Settings(request_timeout=0)

        with pytest.raises(ValueError, match="must be > 0"):
            Settings(cache_ttl_hours=-1)

    def test_log_level(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

        with pytest.raises(ValueError, match="Invalid log level"):
            Settings(log_level="chatty")

    def test_cache_ttl_seconds(self):
        assert Settings(cache_ttl_hours=24).cache_ttl_seconds == 86400

    def test_search_queries_list_strips_whitespace(self):
        settings = Settings(search_queries=" FOMC meeting date , GDP release date ,")
        assert settings.search_queries_list == ["FOMC meeting date", "GDP release date"]

    def test_trusted_sources_lowercased(self):
        settings = Settings(trusted_sources="Reuters, Bloomberg")
        assert settings.trusted_sources_list == ["reuters", "bloomberg"]

    def test_validate_news_api_credentials(self):
        settings = Settings(news_api_key="")
        with pytest.raises(ValueError, match="NEWS_API_KEY"):
            settings.validate_news_api_credentials()

        settings = Settings(news_api_key="key")
        settings.validate_news_api_credentials()  # Should not raise


class TestSettingsFromEnvironment:
    """Tests for loading settings from environment variables."""

    def test_load_from_env(self):
        env = {
            "NEWS_API_KEY": "test_key",
            "NEWS_PAGE_SIZE": "50",
            "CACHE_TTL_HOURS": "6",
            "SEARCH_QUERIES": "CPI release date,FOMC meeting date",
        }

        with patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)

        assert settings.news_api_key == "test_key"
        assert settings.news_page_size == 50
        assert settings.cache_ttl_seconds == 6 * 3600
        assert settings.search_queries_list == ["CPI release date", "FOMC meeting date"]

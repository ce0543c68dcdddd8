"""Pytest configuration and fixtures for calendar tests."""
from __future__ import annotations

import os
from datetime import date, datetime, timezone
from typing import Optional
from unittest.mock import MagicMock

import pytest

# Set test environment variables before importing modules
os.environ.setdefault("NEWS_API_KEY", "test_key")

from macrocal.aggregator import EventAggregator
from macrocal.cache import InMemoryCache
from macrocal.config import Settings, reload_settings
from macrocal.core.models import ArticleRecord, SearchResult

# 2025-11-12 is a Wednesday
TODAY = date(2025, 11, 12)
PUBLISHED = datetime(2025, 11, 12, 14, 30, tzinfo=timezone.utc)


class FakeNewsClient:
    """Stand-in for NewsApiClient returning canned results per query."""

    def __init__(self, results: Optional[dict[str, SearchResult]] = None):
        self.results = results or {}
        self.queries: list[str] = []

    def search(self, query: str) -> SearchResult:
        self.queries.append(query)
        return self.results.get(query, SearchResult())


class FakeClock:
    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_article(
    title: str,
    description: Optional[str] = None,
    source_name: Optional[str] = "Reuters",
    published_at: datetime = PUBLISHED,
) -> ArticleRecord:
    return ArticleRecord(
        title=title,
        description=description,
        published_at=published_at,
        source_name=source_name,
    )


def found(*articles: ArticleRecord) -> SearchResult:
    return SearchResult(articles=tuple(articles))


@pytest.fixture
def fake_client() -> FakeNewsClient:
    return FakeNewsClient()


@pytest.fixture
def aggregator(fake_client: FakeNewsClient) -> EventAggregator:
    """EventAggregator pinned to TODAY."""
    return EventAggregator(fake_client, today=lambda: TODAY)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> InMemoryCache:
    return InMemoryCache(ttl=24 * 3600, clock=clock)


@pytest.fixture
def test_settings() -> Settings:
    """Settings reloaded from the test environment."""
    return reload_settings()


@pytest.fixture
def mock_httpx_client():
    """Mock httpx client returning an empty NewsAPI result."""
    mock = MagicMock()
    mock_response = MagicMock()
    mock_response.status_code = 200
    mock_response.json.return_value = {"status": "ok", "totalResults": 0, "articles": []}
    mock.get.return_value = mock_response
    return mock

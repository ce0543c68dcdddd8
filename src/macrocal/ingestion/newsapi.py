from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Optional

import httpx

from macrocal.core.circuit_breaker import CircuitBreaker, CircuitOpenError
from macrocal.core.logger import get_logger, log_error_with_context
from macrocal.core.models import ArticleRecord, SearchResult
from macrocal.core.retry import with_retry
from macrocal.core.timeutils import local_today, parse_timestamp

log = get_logger("newsapi")

NEWSAPI_BASE = "https://newsapi.org/v2"


class NewsApiError(Exception):
    """Base exception for NewsAPI errors."""


class NewsApiStatusError(NewsApiError):
    """Non-success response from NewsAPI (HTTP status or error body)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NewsApiPayloadError(NewsApiError):
    """A successful response whose body is not the documented shape."""


class NewsApiClient:
    """NewsAPI ``/everything`` search client.

    Every failure that concerns a single query (timeouts, connection errors,
    non-2xx responses, ``{"status": "error"}`` bodies, an open circuit) comes
    back as ``SearchResult.unavailable`` instead of raising. Only a malformed
    success payload raises, as ``NewsApiPayloadError``.

    Usage:
        with NewsApiClient(api_key="your_key") as client:
            result = client.search("CPI release date inflation report")
            for article in result.articles:
                print(article.title)
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = NEWSAPI_BASE,
        language: str = "en",
        page_size: int = 20,
        lookback_days: int = 7,
        timeout: float = 10.0,
        retries: int = 3,
        retry_wait: float = 1.0,
        breaker: Optional[CircuitBreaker] = None,
        client: Optional[httpx.Client] = None,
    ):
        if not api_key:
            raise ValueError("NEWS_API_KEY is required")

        self.base_url = base_url.rstrip("/")
        self.language = language
        self.page_size = page_size
        self.lookback_days = lookback_days
        self.client = client or httpx.Client(
            timeout=timeout,
            headers={
                "X-Api-Key": api_key,
                "User-Agent": "macrocal/0.1",
            },
        )
        self.breaker = breaker or CircuitBreaker(name="newsapi")
        self._get = with_retry(max_attempts=retries, min_wait=retry_wait, max_wait=8.0)(self.client.get)

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()
        log.debug("NewsAPI client closed")

    def __enter__(self) -> "NewsApiClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _fetch(self, params: dict[str, Any]) -> httpx.Response:
        response = self._get(f"{self.base_url}/everything", params=params)
        if not 200 <= response.status_code < 300:
            raise NewsApiStatusError(
                f"HTTP {response.status_code}", status_code=response.status_code
            )
        return response

    def search(self, query: str, from_date: Optional[date] = None) -> SearchResult:
        """Search recent articles for ``query``.

        Args:
            query: Free-text search query
            from_date: Oldest publication date (default: today - lookback_days)
        """
        if from_date is None:
            from_date = local_today() - timedelta(days=self.lookback_days)

        params = {
            "q": query,
            "language": self.language,
            "sortBy": "publishedAt",
            "pageSize": self.page_size,
            "from": from_date.isoformat(),
        }

        try:
            response = self.breaker.call(lambda: self._fetch(params))
        except CircuitOpenError as e:
            log.warning(f"Skipping query '{query}': {e}")
            return SearchResult.unavailable(str(e))
        except NewsApiStatusError as e:
            log_error_with_context(
                log, f"Query '{query}' failed", e,
                level=logging.WARNING, query=query, status_code=e.status_code,
            )
            return SearchResult.unavailable(str(e))
        except httpx.HTTPError as e:
            log_error_with_context(log, f"Query '{query}' failed", e, level=logging.WARNING, query=query)
            return SearchResult.unavailable(str(e))

        try:
            payload = response.json()
        except ValueError as e:
            raise NewsApiPayloadError(f"Invalid JSON from NewsAPI for '{query}'") from e

        if isinstance(payload, dict) and payload.get("status") == "error":
            message = payload.get("message") or payload.get("code") or "unknown error"
            log.warning(f"Query '{query}' rejected by NewsAPI: {message}")
            return SearchResult.unavailable(str(message))

        articles = parse_articles(payload)
        log.debug(f"Query '{query}' returned {len(articles)} articles")
        return SearchResult(articles=articles)


def parse_articles(payload: Any) -> tuple[ArticleRecord, ...]:
    """Convert a NewsAPI response body into ArticleRecords.

    Articles without any text or with an unparseable ``publishedAt`` are
    skipped.

    Raises:
        NewsApiPayloadError: If the body is not an object with an article list.
    """
    if not isinstance(payload, dict):
        raise NewsApiPayloadError(f"Expected a JSON object, got {type(payload).__name__}")

    raw_articles = payload.get("articles") or []
    if not isinstance(raw_articles, list):
        raise NewsApiPayloadError("'articles' is not a list")

    articles: list[ArticleRecord] = []
    for item in raw_articles:
        if not isinstance(item, dict):
            log.debug(f"Skipping non-object article: {item!r}")
            continue

        title = item.get("title") or ""
        description = item.get("description") or None
        if not title and not description:
            continue

        try:
            published_at = parse_timestamp(item.get("publishedAt") or "")
        except (TypeError, ValueError):
            log.debug(f"Skipping article with bad publishedAt: {title[:60]}")
            continue

        source = item.get("source") or {}
        source_name = source.get("name") if isinstance(source, dict) else None

        articles.append(
            ArticleRecord(
                title=title,
                description=description,
                published_at=published_at,
                source_name=source_name or None,
            )
        )
    return tuple(articles)

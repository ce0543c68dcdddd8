from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Optional, Sequence

from macrocal.aggregator import EventAggregator
from macrocal.cache import CalendarCache, InMemoryCache
from macrocal.config import Settings
from macrocal.core.logger import get_logger
from macrocal.core.models import CacheEntry, MarketEvent
from macrocal.ingestion.newsapi import NewsApiClient

log = get_logger("service")

CACHE_KEY = "news_calendar"


@dataclass(frozen=True)
class CalendarSnapshot:
    events: tuple[MarketEvent, ...]
    cached: bool
    cache_age: int  # seconds
    duration_ms: Optional[int] = None  # set on fresh builds only


class CalendarService:
    """Serves the calendar from cache, building it at most once at a time.

    On a miss the caller takes the build lock, checks the cache again and,
    if still empty, runs one aggregation pass. Callers that were waiting on
    the lock find the new entry and return it as a cached result. A pass
    that raises stores nothing.
    """

    def __init__(
        self,
        aggregator: EventAggregator,
        cache: CalendarCache,
        queries: Sequence[str],
    ):
        self.aggregator = aggregator
        self.cache = cache
        self.queries = tuple(queries)
        self._build_lock = threading.Lock()

    def _from_cache(self, entry: CacheEntry) -> CalendarSnapshot:
        age = int(round(self.cache.clock() - entry.created_at))
        log.info(f"Returning cached calendar (age: {age}s)")
        return CalendarSnapshot(events=entry.events, cached=True, cache_age=age)

    def get_calendar(self) -> CalendarSnapshot:
        entry = self.cache.get(CACHE_KEY)
        if entry is not None:
            return self._from_cache(entry)

        with self._build_lock:
            entry = self.cache.get(CACHE_KEY)
            if entry is not None:
                return self._from_cache(entry)

            log.info(f"Building calendar from {len(self.queries)} queries")
            start = time.monotonic()
            events = self.aggregator.aggregate(self.queries)
            entry = self.cache.new_entry(events)
            self.cache.set(CACHE_KEY, entry)
            duration_ms = int((time.monotonic() - start) * 1000)
            log.info(f"Calendar built in {duration_ms}ms: {len(entry.events)} events")

        return CalendarSnapshot(
            events=entry.events, cached=False, cache_age=0, duration_ms=duration_ms
        )

    def invalidate(self) -> None:
        self.cache.clear()


def build_service(settings: Settings) -> CalendarService:
    """Wire a CalendarService from settings.

    Raises:
        ValueError: If NEWS_API_KEY is not configured.
    """
    settings.validate_news_api_credentials()
    client = NewsApiClient(
        api_key=settings.news_api_key,
        base_url=settings.news_api_base_url,
        language=settings.news_language,
        page_size=settings.news_page_size,
        lookback_days=settings.news_lookback_days,
        timeout=settings.request_timeout,
    )
    aggregator = EventAggregator(client, trusted_sources=settings.trusted_sources_list)
    cache = InMemoryCache(ttl=settings.cache_ttl_seconds)
    return CalendarService(aggregator, cache, settings.search_queries_list)

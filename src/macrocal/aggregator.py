from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Iterable, Optional, Protocol, Sequence

from macrocal.config import TRUSTED_SOURCES
from macrocal.core.logger import get_logger
from macrocal.core.models import (
    ArticleRecord,
    ClassificationResult,
    MarketEvent,
    SearchResult,
    make_event_id,
)
from macrocal.extraction.classifier import classify
from macrocal.extraction.dates import extract_dates

log = get_logger("aggregator")

# Source label for articles the provider returned without a source name.
UNKNOWN_SOURCE = "Unknown"


class NewsSearch(Protocol):
    def search(self, query: str) -> SearchResult: ...


def is_trusted_source(source_name: Optional[str], trusted: Iterable[str] = TRUSTED_SOURCES) -> bool:
    """Substring allowlist check. Articles without a source name pass."""
    if not source_name:
        return True
    lowered = source_name.lower()
    return any(t in lowered for t in trusted)


class EventAggregator:
    """Turns news search results into a deduplicated list of MarketEvents.

    Queries run one at a time; each article from a trusted (or unnamed)
    source is classified, its dates extracted, and every (event, date) pair
    merged into a single MarketEvent keyed by ``"<event name>-<ISO date>"``.
    A second distinct source for the same pair marks the event Verified.
    """

    def __init__(
        self,
        client: NewsSearch,
        trusted_sources: Iterable[str] = TRUSTED_SOURCES,
        classifier: Callable[[str], ClassificationResult] = classify,
        date_extractor: Callable[..., list[date]] = extract_dates,
        today: Optional[Callable[[], date]] = None,
    ):
        self.client = client
        self.trusted_sources = tuple(s.lower() for s in trusted_sources)
        self.classifier = classifier
        self.date_extractor = date_extractor
        self.today = today

    def aggregate(self, queries: Sequence[str]) -> list[MarketEvent]:
        events: dict[str, MarketEvent] = {}

        for query in queries:
            result = self.client.search(query)
            if not result.available:
                log.warning(f"Query '{query}' unavailable, continuing: {result.error}")
                continue

            log.info(f"Query '{query}': {len(result.articles)} articles")
            for article in result.articles:
                self._merge_article(article, events)

        ordered = sorted(events.values(), key=lambda e: e.date.isoformat())
        log.info(f"Extracted {len(ordered)} upcoming events from news")
        return ordered

    def _merge_article(self, article: ArticleRecord, events: dict[str, MarketEvent]) -> None:
        if not is_trusted_source(article.source_name, self.trusted_sources):
            log.debug(f"Skipping untrusted source: {article.source_name}")
            return

        text = article.text
        classification = self.classifier(text)
        event_name = classification.event_name
        if event_name is None:
            return

        dates = self._extract(text, article.published_at)
        source = article.source_name or UNKNOWN_SOURCE

        for day in dates:
            key = make_event_id(event_name, day)
            existing = events.get(key)
            if existing is None:
                events[key] = MarketEvent.create(event_name, day, classification, source)
            elif existing.add_source(source):
                log.debug(f"{key}: {len(existing.sources)} sources ({existing.confidence})")

    def _extract(self, text: str, published_at: datetime) -> list[date]:
        if self.today is None:
            return self.date_extractor(text, published_at)
        return self.date_extractor(text, published_at, today=self.today())


def summarize(events: Iterable[MarketEvent]) -> dict[str, int]:
    """Counts per impact tier and per confidence level."""
    breakdown = {"High": 0, "Medium": 0, "Low": 0, "Verified": 0, "Estimated": 0}
    for event in events:
        breakdown[event.impact] += 1
        breakdown[event.confidence] += 1
    return breakdown

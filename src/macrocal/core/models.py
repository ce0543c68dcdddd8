from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal, Optional

from macrocal.core.timeutils import long_date

Category = Literal["monetary", "inflation", "employment", "consumer", "growth", "other"]
Impact = Literal["High", "Medium", "Low"]
Confidence = Literal["Verified", "Estimated"]

VERIFIED_SOURCE_COUNT = 2


@dataclass(frozen=True)
class ArticleRecord:
    title: str
    published_at: datetime
    description: Optional[str] = None
    source_name: Optional[str] = None

    @property
    def text(self) -> str:
        return f"{self.title} {self.description or ''}"


@dataclass(frozen=True)
class ClassificationResult:
    category: Category
    impact: Impact
    icon: str
    event_name: Optional[str] = None  # None: no known event type


@dataclass(frozen=True)
class SearchResult:
    """Outcome of one news search: the articles, or an unavailable marker."""

    articles: tuple[ArticleRecord, ...] = ()
    available: bool = True
    error: Optional[str] = None

    @classmethod
    def unavailable(cls, error: str) -> "SearchResult":
        return cls(articles=(), available=False, error=error)


@dataclass
class MarketEvent:
    """One (event type, date) pair corroborated by one or more sources."""

    id: str
    date: date
    title: str
    description: str
    category: Category
    impact: Impact
    icon: str
    sources: list[str] = field(default_factory=list)
    confidence: Confidence = "Estimated"

    @classmethod
    def create(
        cls,
        event_name: str,
        day: date,
        classification: ClassificationResult,
        source: str,
    ) -> "MarketEvent":
        return cls(
            id=make_event_id(event_name, day),
            date=day,
            title=event_name,
            description=f"{classification.icon} {event_name}",
            category=classification.category,
            impact=classification.impact,
            icon=classification.icon,
            sources=[source],
        )

    @property
    def display_date(self) -> str:
        return long_date(self.date)

    def add_source(self, source: str) -> bool:
        """Record a corroborating source. Returns False if already present."""
        if source in self.sources:
            return False
        self.sources.append(source)
        if len(self.sources) >= VERIFIED_SOURCE_COUNT:
            self.confidence = "Verified"
        return True

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "displayDate": self.display_date,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "impact": self.impact,
            "icon": self.icon,
            "sources": list(self.sources),
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class CacheEntry:
    events: tuple[MarketEvent, ...]
    created_at: float
    expires_at: float


def make_event_id(event_name: str, day: date) -> str:
    return f"{event_name}-{day.isoformat()}"

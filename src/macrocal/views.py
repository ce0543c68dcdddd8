from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from macrocal.core.models import MarketEvent
from macrocal.core.timeutils import local_today


def group_by_month(events: Iterable[MarketEvent]) -> dict[str, list[MarketEvent]]:
    """Bucket events by ``YYYY-MM``, months and events in date order."""
    grouped: dict[str, list[MarketEvent]] = {}
    for event in sorted(events, key=lambda e: e.date):
        grouped.setdefault(event.date.strftime("%Y-%m"), []).append(event)
    return grouped


def events_on(events: Iterable[MarketEvent], day: date) -> list[MarketEvent]:
    return [e for e in events if e.date == day]


def upcoming(
    events: Iterable[MarketEvent],
    count: int = 10,
    today: Optional[date] = None,
) -> list[MarketEvent]:
    """The next ``count`` events on or after ``today``."""
    if today is None:
        today = local_today()
    return sorted((e for e in events if e.date >= today), key=lambda e: e.date)[:count]

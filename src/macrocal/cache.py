from __future__ import annotations

import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Iterable, Optional

from macrocal.core.logger import get_logger
from macrocal.core.models import CacheEntry, MarketEvent

log = get_logger("cache")


class CalendarCache(ABC):
    """Keyed store of CacheEntries with a fixed time-to-live."""

    def __init__(self, ttl: float, clock: Callable[[], float] = time.time):
        if ttl <= 0:
            raise ValueError(f"ttl must be > 0, got {ttl}")
        self.ttl = ttl
        self.clock = clock

    def new_entry(self, events: Iterable[MarketEvent]) -> CacheEntry:
        now = self.clock()
        return CacheEntry(events=tuple(events), created_at=now, expires_at=now + self.ttl)

    @abstractmethod
    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the live entry for ``key``, or None if absent or expired."""
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, entry: CacheEntry) -> None:
        raise NotImplementedError

    @abstractmethod
    def clear(self) -> None:
        raise NotImplementedError


class InMemoryCache(CalendarCache):
    """Process-local cache; nothing survives a restart."""

    def __init__(self, ttl: float, clock: Callable[[], float] = time.time):
        super().__init__(ttl, clock)
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self.clock():
                del self._entries[key]
                log.debug(f"Cache entry '{key}' expired")
                return None
            return entry

    def set(self, key: str, entry: CacheEntry) -> None:
        with self._lock:
            self._entries[key] = entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

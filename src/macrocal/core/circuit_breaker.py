from __future__ import annotations

import time
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, TypeVar, Optional

from macrocal.core.logger import get_logger

log = get_logger("circuit_breaker")

T = TypeVar("T")


class CircuitState(Enum):
    CLOSED = "closed"  # Provider healthy
    OPEN = "open"  # Provider failing, queries short-circuit
    HALF_OPEN = "half_open"  # Probing with a single query


class CircuitOpenError(Exception):
    """Raised when a call is rejected because the circuit is open."""


@dataclass
class CircuitBreaker:
    """Stops hammering a news provider that keeps failing.

    An aggregation pass issues one search per query. When the provider is
    down every one of those would wait out its timeout and retries; once
    ``failure_threshold`` consecutive calls have failed the breaker opens and
    the remaining queries are rejected immediately until ``recovery_timeout``
    seconds have passed.

    Usage:
        breaker = CircuitBreaker(name="newsapi")

        try:
            payload = breaker.call(lambda: client.get(url))
        except CircuitOpenError:
            ...  # treat the query as unavailable
    """

    name: str
    failure_threshold: int = 3
    recovery_timeout: float = 60.0
    half_open_max_calls: int = 1
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)

    _state: CircuitState = field(default=CircuitState.CLOSED, init=False)
    _failure_count: int = field(default=0, init=False)
    _last_failure_time: float = field(default=0.0, init=False)
    _half_open_calls: int = field(default=0, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def state(self) -> CircuitState:
        with self._lock:
            if self._state == CircuitState.OPEN and self._should_try_reset():
                self._transition_to(CircuitState.HALF_OPEN)
            return self._state

    @property
    def is_open(self) -> bool:
        return self.state == CircuitState.OPEN

    def _should_try_reset(self) -> bool:
        return self.clock() - self._last_failure_time >= self.recovery_timeout

    def _transition_to(self, new_state: CircuitState) -> None:
        old_state = self._state
        self._state = new_state

        if new_state == CircuitState.HALF_OPEN:
            self._half_open_calls = 0

        if old_state != new_state:
            log.info(f"Circuit '{self.name}': {old_state.value} -> {new_state.value}")

    def call(self, func: Callable[[], T]) -> T:
        """Execute ``func`` under circuit protection.

        Raises:
            CircuitOpenError: If the circuit is open (or half-open and busy).
        """
        with self._lock:
            if self._state == CircuitState.OPEN and self._should_try_reset():
                self._transition_to(CircuitState.HALF_OPEN)

            if self._state == CircuitState.OPEN:
                remaining = self.recovery_timeout - (self.clock() - self._last_failure_time)
                raise CircuitOpenError(
                    f"Circuit '{self.name}' is open. Retry after {remaining:.1f}s"
                )

            if self._state == CircuitState.HALF_OPEN:
                if self._half_open_calls >= self.half_open_max_calls:
                    raise CircuitOpenError(
                        f"Circuit '{self.name}' is half-open and at capacity"
                    )
                self._half_open_calls += 1

        # Execute the call outside the lock
        try:
            result = func()
        except Exception as e:
            self._on_failure(e)
            raise
        self._on_success()
        return result

    def _on_success(self) -> None:
        with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                self._transition_to(CircuitState.CLOSED)
            self._failure_count = 0

    def _on_failure(self, error: Exception) -> None:
        with self._lock:
            self._failure_count += 1
            self._last_failure_time = self.clock()

            if self._state == CircuitState.HALF_OPEN:
                self._transition_to(CircuitState.OPEN)
                log.warning(f"Circuit '{self.name}' reopened after failed recovery: {error}")
            elif self._state == CircuitState.CLOSED:
                if self._failure_count >= self.failure_threshold:
                    self._transition_to(CircuitState.OPEN)
                    log.warning(
                        f"Circuit '{self.name}' opened after {self._failure_count} failures: {error}"
                    )

    def reset(self) -> None:
        """Manually reset the circuit to closed state."""
        with self._lock:
            self._transition_to(CircuitState.CLOSED)
            self._failure_count = 0

    def get_stats(self) -> dict:
        """Return current circuit breaker statistics."""
        with self._lock:
            return {
                "name": self.name,
                "state": self._state.value,
                "failure_count": self._failure_count,
                "last_failure_time": self._last_failure_time,
            }

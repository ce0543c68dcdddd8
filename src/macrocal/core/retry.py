from __future__ import annotations

import ssl
from functools import wraps
from typing import Any, Callable, TypeVar

from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential_jitter,
    retry_if_exception_type,
    before_sleep_log,
)
import httpx

from macrocal.core.logger import get_logger

log = get_logger("retry")

T = TypeVar("T")

# Default retryable exceptions
RETRYABLE_EXCEPTIONS = (
    httpx.TimeoutException,
    httpx.ConnectError,
    httpx.RemoteProtocolError,
    ConnectionError,
    TimeoutError,
    ssl.SSLError,
)


def with_retry(
    max_attempts: int = 3,
    min_wait: float = 1.0,
    max_wait: float = 10.0,
    exceptions: tuple = RETRYABLE_EXCEPTIONS,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator to add retry logic with exponential backoff and jitter.

    Args:
        max_attempts: Maximum number of retry attempts (default: 3)
        min_wait: Minimum wait time between retries in seconds (default: 1.0)
        max_wait: Maximum wait time between retries in seconds (default: 10.0)
        exceptions: Tuple of exception types to retry on

    Example:
        @with_retry(max_attempts=3)
        def fetch_data():
            response = httpx.get(url)
            return response.json()
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            @retry(
                stop=stop_after_attempt(max_attempts),
                wait=wait_exponential_jitter(initial=min_wait, max=max_wait, jitter=min_wait / 2),
                retry=retry_if_exception_type(exceptions),
                before_sleep=before_sleep_log(log, log_level=20),  # INFO level
                reraise=True,
            )
            def inner() -> T:
                return func(*args, **kwargs)

            return inner()

        return wrapper

    return decorator

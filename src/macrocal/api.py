from __future__ import annotations

import threading
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from macrocal.aggregator import summarize
from macrocal.config import Settings, get_settings
from macrocal.core.logger import get_logger, set_correlation_id
from macrocal.core.timeutils import iso, utcnow
from macrocal.service import CalendarService, build_service

log = get_logger("api")

SOURCE_NAME = "NewsAPI"
CACHE_CONTROL = "public, max-age=86400"


class ConfigurationError(Exception):
    """Raised when the service cannot be built from the current settings."""


def create_app(
    service: Optional[CalendarService] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Build the calendar API.

    Args:
        service: Pre-built CalendarService (tests, embedding). When omitted it
            is created from settings on the first request.
        settings: Settings to build the service from (default: get_settings()).
    """
    app = FastAPI(
        title="macrocal",
        description="Upcoming U.S. economic events mined from financial news",
        version="0.1.0",
    )
    app.state.service = service
    service_lock = threading.Lock()

    def get_service() -> CalendarService:
        with service_lock:
            if app.state.service is None:
                try:
                    app.state.service = build_service(settings or get_settings())
                except ValueError as e:
                    raise ConfigurationError(
                        "Server configuration error: NEWS_API_KEY not set"
                    ) from e
            return app.state.service

    @app.middleware("http")
    async def correlation_id(request: Request, call_next):
        cid = set_correlation_id(request.headers.get("X-Correlation-ID"))
        response = await call_next(request)
        response.headers["X-Correlation-ID"] = cid
        return response

    @app.get("/calendar")
    def get_calendar():
        started = time.monotonic()
        try:
            snapshot = get_service().get_calendar()
        except ConfigurationError as e:
            log.error(str(e))
            return JSONResponse(
                status_code=500,
                content={"error": str(e), "timestamp": iso(utcnow())},
            )
        except Exception as e:
            log.exception(f"Calendar build failed: {e}")
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Failed to fetch market calendar",
                    "details": str(e) or type(e).__name__,
                    "timestamp": iso(utcnow()),
                },
            )

        events = [event.to_dict() for event in snapshot.events]
        if snapshot.cached:
            return {
                "events": events,
                "cached": True,
                "cacheAge": snapshot.cache_age,
                "timestamp": iso(utcnow()),
                "source": SOURCE_NAME,
            }

        duration = int((time.monotonic() - started) * 1000)
        return JSONResponse(
            content={
                "events": events,
                "cached": False,
                "count": len(events),
                "breakdown": summarize(snapshot.events),
                "timestamp": iso(utcnow()),
                "duration": duration,
                "source": SOURCE_NAME,
            },
            headers={
                "Cache-Control": CACHE_CONTROL,
                "X-Response-Time": f"{duration}ms",
            },
        )

    @app.get("/health")
    def health():
        return {"status": "ok", "timestamp": iso(utcnow())}

    return app

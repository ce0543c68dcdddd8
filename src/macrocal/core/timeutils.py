from __future__ import annotations

from datetime import date, datetime, timezone

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def iso(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat()

def local_today() -> date:
    """Current date on the local clock; the floor for extracted dates."""
    return date.today()

def long_date(day: date) -> str:
    """Render e.g. ``Wednesday, November 12, 2025``."""
    return f"{day:%A}, {day:%B} {day.day}, {day.year}"

def parse_timestamp(value: str) -> datetime:
    """Parse a provider ISO 8601 timestamp (``Z`` suffix allowed).

    Raises:
        TypeError: If value is not a string.
        ValueError: If value is not ISO 8601.
    """
    if not isinstance(value, str):
        raise TypeError(f"Expected an ISO 8601 string, got {type(value).__name__}")
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed

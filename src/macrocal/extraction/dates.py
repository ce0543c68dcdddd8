"""Candidate event dates from free-text news.

Each entry in ``DATE_PATTERNS`` pairs a compiled pattern with a function that
turns one match into a calendar date (or None). ``extract_dates`` runs every
pattern over the text and keeps the distinct results that are not in the past.
Year-less dates take the reference (publication) year and are dropped, not
rolled forward, when that lands before today.
"""
from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Union

from macrocal.core.timeutils import local_today

MONTHS: dict[str, int] = {
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sept": 9, "sep": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}

WEEKDAYS: dict[str, int] = {
    "monday": 0, "tuesday": 1, "wednesday": 2, "thursday": 3,
    "friday": 4, "saturday": 5, "sunday": 6,
}

# Longest spellings first so "Sept" is not cut short at "Sep".
_MONTH_RE = "|".join(sorted(MONTHS, key=len, reverse=True))
_WEEKDAY_RE = "|".join(WEEKDAYS)
_DAY_RE = r"(\d{1,2})(?:st|nd|rd|th)?(?!\d)"

# Number of years after the current one accepted for bare ISO dates.
ISO_YEAR_WINDOW = 4

Extractor = Callable[["re.Match[str]", date, date], Optional[date]]


def month_day(month: str, day: int, year: int) -> Optional[date]:
    """Build a date from a month name, or None if it is not a real date."""
    number = MONTHS.get(month.lower())
    if number is None or day < 1 or day > 31:
        return None
    try:
        return date(year, number, day)
    except ValueError:
        return None


def next_weekday(name: str, reference: date) -> Optional[date]:
    """Next ``name`` strictly after ``reference`` (same weekday: +7 days)."""
    target = WEEKDAYS.get(name.lower())
    if target is None:
        return None
    days_ahead = (target - reference.weekday()) % 7
    return reference + timedelta(days=days_ahead or 7)


def _on_month_day(match: "re.Match[str]", reference: date, today: date) -> Optional[date]:
    return month_day(match.group(1), int(match.group(2)), reference.year)


def _month_day_year(match: "re.Match[str]", reference: date, today: date) -> Optional[date]:
    year = int(match.group(3)) if match.group(3) else reference.year
    return month_day(match.group(1), int(match.group(2)), year)


def _relative_weekday(match: "re.Match[str]", reference: date, today: date) -> Optional[date]:
    return next_weekday(match.group(2), reference)


def _iso_date(match: "re.Match[str]", reference: date, today: date) -> Optional[date]:
    year, month, day = (int(g) for g in match.groups())
    if not today.year <= year <= today.year + ISO_YEAR_WINDOW:
        return None
    try:
        return date(year, month, day)
    except ValueError:
        return None


DATE_PATTERNS: tuple[tuple["re.Pattern[str]", Extractor], ...] = (
    # "on November 14", "on Dec. 12th"
    (re.compile(rf"\bon\s+({_MONTH_RE})\.?\s+{_DAY_RE}", re.IGNORECASE), _on_month_day),
    # "November 14", "Jan 5th", "December 10, 2025"
    (
        re.compile(rf"\b({_MONTH_RE})\.?\s+{_DAY_RE}(?:,?\s+(\d{{4}}))?", re.IGNORECASE),
        _month_day_year,
    ),
    # "next Thursday", "this Friday", "upcoming Wednesday"
    (
        re.compile(rf"\b(next|this|upcoming)\s+({_WEEKDAY_RE})\b", re.IGNORECASE),
        _relative_weekday,
    ),
    # "2025-11-14"
    (re.compile(r"\b(\d{4})-(\d{2})-(\d{2})\b"), _iso_date),
)


def extract_dates(
    text: str,
    reference: Union[datetime, date],
    today: Optional[date] = None,
) -> list[date]:
    """Return the distinct upcoming dates mentioned in ``text``, ascending.

    Args:
        text: Article title and description.
        reference: Publication timestamp; anchors year-less and relative dates.
        today: Floor for results. Defaults to the local current date.
    """
    if isinstance(reference, datetime):
        reference = reference.date()
    if today is None:
        today = local_today()

    found: set[date] = set()
    for pattern, extractor in DATE_PATTERNS:
        for match in pattern.finditer(text or ""):
            candidate = extractor(match, reference, today)
            if candidate is not None and candidate >= today:
                found.add(candidate)
    return sorted(found)

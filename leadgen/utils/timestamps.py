"""Timestamp utilities for UTC handling and posting-date parsing.

Listing sources report posting dates in two shapes: ISO 8601 strings (usually
inside JSON-LD ``datePosted``) and relative text such as "Posted 3 days ago".
Everything downstream works with timezone-aware UTC datetimes.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Ensure a datetime is timezone-aware and in UTC.

    Naive datetimes are treated as UTC; aware ones are converted.

    Args:
        dt: Datetime to convert (can be None)

    Returns:
        Timezone-aware datetime in UTC, or None if input is None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def parse_iso_datetime(iso_string: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 datetime string to UTC datetime.

    Supports:
    - 2025-11-04T12:00:00Z
    - 2025-11-04T12:00:00+00:00
    - 2025-11-04T12:00:00
    - 2025-11-04

    Args:
        iso_string: ISO 8601 formatted datetime string

    Returns:
        Timezone-aware datetime in UTC, or None if parsing fails
    """
    if not iso_string or not iso_string.strip():
        return None

    cleaned = iso_string.strip()
    if cleaned.endswith("Z"):
        cleaned = cleaned[:-1] + "+00:00"

    try:
        return ensure_utc(datetime.fromisoformat(cleaned))
    except ValueError:
        pass

    for fmt in ("%Y-%m-%dT%H:%M:%S", "%Y-%m-%d"):
        try:
            return ensure_utc(datetime.strptime(iso_string.strip(), fmt))
        except ValueError:
            continue
    return None


_RELATIVE_RE = re.compile(
    r"(\d+)\+?\s*(minute|min|hour|hr|day|week|month)s?\s+ago", re.IGNORECASE
)

_RELATIVE_UNITS = {
    "minute": timedelta(minutes=1),
    "min": timedelta(minutes=1),
    "hour": timedelta(hours=1),
    "hr": timedelta(hours=1),
    "day": timedelta(days=1),
    "week": timedelta(weeks=1),
    "month": timedelta(days=30),
}


def parse_posted_text(text: Optional[str], now: Optional[datetime] = None) -> Optional[datetime]:
    """Resolve relative posting text ("Posted 3 days ago", "Just posted") to UTC.

    Args:
        text: Raw posting text scraped from a listing card
        now: Reference time (defaults to utc_now())

    Returns:
        Approximate posting time in UTC, or None when the text is not understood

    Example:
        >>> ref = datetime(2025, 11, 4, 12, 0, tzinfo=timezone.utc)
        >>> parse_posted_text("Posted 2 days ago", now=ref)
        datetime.datetime(2025, 11, 2, 12, 0, tzinfo=datetime.timezone.utc)
    """
    if not text:
        return None

    reference = ensure_utc(now) if now else utc_now()
    lowered = text.strip().lower()

    if any(marker in lowered for marker in ("just posted", "today")):
        return reference
    if "yesterday" in lowered:
        return reference - timedelta(days=1)

    match = _RELATIVE_RE.search(lowered)
    if not match:
        return None

    amount = int(match.group(1))
    return reference - amount * _RELATIVE_UNITS[match.group(2).lower()]


def format_timestamp(dt: datetime, include_microseconds: bool = False) -> str:
    """Format a datetime as ISO 8601 string in UTC with 'Z' suffix."""
    dt_utc = ensure_utc(dt)
    if dt_utc is None:
        return ""

    if include_microseconds:
        return dt_utc.strftime("%Y-%m-%dT%H:%M:%S.%fZ")
    return dt_utc.strftime("%Y-%m-%dT%H:%M:%SZ")

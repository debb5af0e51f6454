"""Utility functions for time handling and posting-date parsing."""

from .timestamps import (
    ensure_utc,
    format_timestamp,
    parse_iso_datetime,
    parse_posted_text,
    utc_now,
)

__all__ = [
    "utc_now",
    "ensure_utc",
    "parse_iso_datetime",
    "parse_posted_text",
    "format_timestamp",
]

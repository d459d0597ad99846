"""
Utility functions and helpers for spotify-trends
Common functions for number/time formatting and text matching
"""

import re
import unicodedata
from datetime import datetime
from typing import Optional, Union


def format_number(number: int) -> str:
    """
    Format a count for compact display

    Args:
        number: Follower, listener or stream count

    Returns:
        "1.2M" for millions, "3.4K" for thousands, otherwise the number
        with thousands separators
    """
    if number >= 1_000_000:
        return f"{number / 1_000_000:.1f}M"
    elif number >= 1_000:
        return f"{number / 1_000:.1f}K"
    return f"{number:,}"


def format_popularity(popularity: Optional[int]) -> str:
    """Render a 0-100 popularity score, or a dash when unknown"""
    if popularity is None:
        return "-"
    return f"{popularity:>3d}"


def format_timestamp(timestamp: Union[str, datetime, None]) -> str:
    """
    Format timestamp for display

    Args:
        timestamp: Timestamp string, datetime object or None

    Returns:
        Formatted timestamp string, "never" for None
    """
    if timestamp is None:
        return "never"

    if isinstance(timestamp, str):
        try:
            dt = datetime.fromisoformat(timestamp.replace('Z', '+00:00'))
        except ValueError:
            return timestamp
    else:
        dt = timestamp

    return dt.strftime('%Y-%m-%d %H:%M:%S')


def format_relative_time(timestamp: float, now: Optional[float] = None) -> str:
    """
    Format a unix timestamp relative to now ("5m ago", "3h ago", "2d ago")

    Args:
        timestamp: Seconds since the epoch (Reddit's created_utc)
        now: Reference time, defaults to the current time

    Returns:
        Short relative age string
    """
    reference = now if now is not None else datetime.now().timestamp()
    delta = max(0, int(reference - timestamp))

    if delta < 60:
        return "just now"
    if delta < 3600:
        return f"{delta // 60}m ago"
    if delta < 86400:
        return f"{delta // 3600}h ago"
    return f"{delta // 86400}d ago"


def truncate_string(text: str, max_length: int, suffix: str = "...") -> str:
    """
    Truncate string to maximum length with suffix

    Args:
        text: Original text
        max_length: Maximum length including suffix
        suffix: Suffix to add when truncating

    Returns:
        Truncated string
    """
    if len(text) <= max_length:
        return text

    truncate_length = max_length - len(suffix)
    if truncate_length <= 0:
        return suffix[:max_length]

    return text[:truncate_length] + suffix


def normalize_query(text: Optional[str]) -> str:
    """
    Normalize free-text search input

    Trims surrounding whitespace and collapses internal runs of whitespace.
    An input made only of whitespace becomes the empty string, which callers
    treat as "no search".
    """
    if not text:
        return ""
    return re.sub(r'\s+', ' ', text).strip()


def _fold(text: str) -> str:
    # NFKC keeps non-Latin scripts intact while unifying compatibility forms
    return unicodedata.normalize('NFKC', text).casefold()


def matches_text(haystack: Optional[str], needle: Optional[str]) -> bool:
    """
    Case-insensitive substring match used for local filtering

    An empty needle matches everything; a missing haystack matches nothing.
    """
    if not needle:
        return True
    if not haystack:
        return False
    return _fold(needle) in _fold(haystack)

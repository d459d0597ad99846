"""
Input validation utilities
"""
import re
from typing import Optional, Tuple

from ..spotify.languages import Language


SEARCH_DEBOUNCE_RANGE = (300, 500)


def validate_language(name: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a language name or code

    Args:
        name: Language name ("hindi") or locale code ("hi")

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not name:
        return False, "Language cannot be empty"

    try:
        Language.from_name(name)
    except ValueError:
        valid = ', '.join(language.key for language in Language)
        return False, f"Unsupported language: {name}. Valid options: {valid}"

    return True, None


def validate_interval(seconds: int) -> Tuple[bool, Optional[str]]:
    """
    Validate refresh interval

    Args:
        seconds: Interval between automatic refreshes

    Returns:
        Tuple of (is_valid, error_message)
    """
    if seconds is None:
        return False, "Refresh interval cannot be empty"

    if seconds <= 0:
        return False, f"Refresh interval must be positive: {seconds}"

    return True, None


def validate_debounce(milliseconds: int) -> Tuple[bool, Optional[str]]:
    """
    Validate the search debounce window

    Args:
        milliseconds: Quiet period before a typed query is sent

    Returns:
        Tuple of (is_valid, error_message)
    """
    low, high = SEARCH_DEBOUNCE_RANGE
    if not low <= milliseconds <= high:
        return False, f"Search debounce must be between {low} and {high} ms: {milliseconds}"
    return True, None


def validate_subreddit(name: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a subreddit name (without the r/ prefix)

    Args:
        name: Subreddit name

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not name:
        return False, "Subreddit cannot be empty"

    if not re.match(r'^[A-Za-z0-9_]{2,21}$', name):
        return False, f"Invalid subreddit name: {name}"

    return True, None

"""Validation utilities for the short link service."""

import re
from urllib.parse import urlsplit
from typing import Tuple


MAX_URL_LENGTH = 2048
MAX_SHORT_CODE_LENGTH = 64

# Conservative shape of a web URL. Runs after the lenient parse check and
# catches what the parser lets through (empty host labels, missing TLD).
LONG_URL_PATTERN = re.compile(
    r"""
    ^https?://
    (?:[A-Za-z0-9_-]+\.)+       # host labels, each followed by one dot
    [A-Za-z]{2,63}              # top-level label
    (?::[0-9]{1,5})?            # optional port
    (?:[/?#][^\s]*)?            # optional path, query, fragment
    \Z
    """,
    re.VERBOSE,
)

SHORT_CODE_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Validate a candidate long URL.

    Args:
        url: The URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "URL is required"

    if len(url) > MAX_URL_LENGTH:
        return False, f"URL is too long (max {MAX_URL_LENGTH} characters)"

    try:
        result = urlsplit(url)
        # Accessing port forces validation of the port component
        result.port
    except ValueError as e:
        return False, f"Invalid URL format: {e}"

    if not result.scheme:
        return False, "URL must be absolute (include http:// or https://)"

    if not result.netloc:
        return False, "URL must have a valid domain"

    if result.scheme not in ("http", "https"):
        return False, "URL must use http or https protocol"

    if not LONG_URL_PATTERN.match(url):
        return False, "URL is not a well-formed web address"

    return True, ""


def is_valid_long_url(candidate: str) -> bool:
    """Pure predicate form of :func:`is_valid_url`."""
    valid, _ = is_valid_url(candidate)
    return valid


def is_valid_short_code(short_code: str, max_length: int = MAX_SHORT_CODE_LENGTH) -> Tuple[bool, str]:
    """Validate a short code taken from a follow request.

    Args:
        short_code: The short code to validate
        max_length: Maximum length for short code

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not short_code or not isinstance(short_code, str):
        return False, "Short code is required"

    if len(short_code) > max_length:
        return False, f"Short code must be at most {max_length} characters"

    if not SHORT_CODE_PATTERN.fullmatch(short_code):
        return False, "Short code can only contain letters, numbers, hyphens, and underscores"

    return True, ""

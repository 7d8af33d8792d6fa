"""Validation utilities for the link service."""

import re
from urllib.parse import urlparse
from typing import Tuple


CODE_PATTERN = re.compile(r"[A-Za-z0-9]{6,8}")
MAX_URL_LENGTH = 2048
ALLOWED_SCHEMES = ("http", "https")

# Codes that would shadow routes served next to /{code}
RESERVED_CODES = {
    "health", "favicon", "robots", "sitemap", "static", "assets",
    "create", "delete", "linknotfound",
}


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Validate a target URL for a new link.

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
        result = urlparse(url)

        if result.scheme not in ALLOWED_SCHEMES:
            return False, "URL must start with http:// or https://"

        if not result.netloc or not result.hostname:
            return False, "URL must have a valid domain"

        # Accessing the port validates it
        result.port

        return True, ""

    except ValueError as e:
        return False, f"Invalid URL format: {str(e)}"


def is_absolute_url(url: str) -> bool:
    """Check that a stored URL is an absolute http(s) URL safe to redirect to."""
    if not url or not isinstance(url, str):
        return False
    try:
        result = urlparse(url)
        result.port
    except ValueError:
        return False
    return result.scheme in ALLOWED_SCHEMES and bool(result.hostname)


def is_valid_short_code(code: str) -> Tuple[bool, str]:
    """Validate a user-supplied short code.

    Codes are 6-8 alphanumeric characters and must not be a reserved word.

    Args:
        code: The short code to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not code or not isinstance(code, str):
        return False, "Short code is required"

    if not CODE_PATTERN.fullmatch(code):
        return False, "Custom code must be 6-8 alphanumeric characters"

    if code.lower() in RESERVED_CODES:
        return False, f"'{code}' is a reserved word and cannot be used"

    return True, ""

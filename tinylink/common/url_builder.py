"""URL building utilities for the link service."""

from typing import Optional
from urllib.parse import urlencode


def build_short_url(
    code: str,
    base_url: str,
    path_prefix: str = "",
) -> str:
    """Build complete short URL.

    Args:
        code: The short code
        base_url: Base URL (e.g., https://example.com)
        path_prefix: Optional path prefix (e.g., /s)

    Returns:
        Complete short URL
    """
    base = base_url.rstrip("/")
    prefix = path_prefix.strip("/")

    if prefix:
        return f"{base}/{prefix}/{code}"
    return f"{base}/{code}"


def build_unavailable_path(code: Optional[str], reason: str, path_prefix: str = "") -> str:
    """Relative location of the "link unavailable" page for a failed resolution."""
    prefix = path_prefix.strip("/")
    path = f"/{prefix}/link-not-found" if prefix else "/link-not-found"
    params = {}
    if code:
        params["code"] = code
    params["reason"] = reason
    return f"{path}?{urlencode(params)}"

"""Request header helpers: proxy forwarding and caller identity."""

from typing import Dict, Mapping, Optional


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    """Case-insensitive lookup; blank values count as absent."""
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            value = (value or "").strip()
            return value or None
    return None


def extract_forwarded_headers(headers: Mapping[str, str]) -> Dict[str, Optional[str]]:
    """Return the X-Forwarded-Proto/Host/For values set by a reverse proxy."""
    return {
        "forwarded_proto": _header(headers, "x-forwarded-proto"),
        "forwarded_host": _header(headers, "x-forwarded-host"),
        "forwarded_for": _header(headers, "x-forwarded-for"),
    }


def extract_identity(headers: Mapping[str, str], header_name: str) -> Optional[str]:
    """Authenticated identity set by the upstream session layer, or None for guests."""
    return _header(headers, header_name)


def build_base_url(
    headers: Mapping[str, str],
    fallback_base_url: str,
    request_scheme: Optional[str] = None,
    request_host: Optional[str] = None,
) -> str:
    """Public origin that short URLs should point at.

    Proxy headers win when both proto and host are present, then the
    request's own scheme and host, then the configured base URL.
    """
    forwarded = extract_forwarded_headers(headers)
    if forwarded["forwarded_proto"] and forwarded["forwarded_host"]:
        return f"{forwarded['forwarded_proto']}://{forwarded['forwarded_host']}"
    if request_scheme and request_host:
        return f"{request_scheme}://{request_host}"
    return fallback_base_url.rstrip("/")


def get_forwarded_path_prefix(headers: Mapping[str, str]) -> str:
    """X-Forwarded-Prefix normalized to '/prefix', or '' when unset."""
    prefix = (_header(headers, "x-forwarded-prefix") or "").strip("/")
    return f"/{prefix}" if prefix else ""

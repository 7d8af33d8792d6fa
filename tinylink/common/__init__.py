"""Common utilities for the link service."""

from .validators import is_valid_url, is_absolute_url, is_valid_short_code
from .headers import extract_forwarded_headers, extract_identity, build_base_url
from .url_builder import build_short_url, build_unavailable_path
from .logging_config import setup_logging

__all__ = [
    "is_valid_url",
    "is_absolute_url",
    "is_valid_short_code",
    "extract_forwarded_headers",
    "extract_identity",
    "build_base_url",
    "build_short_url",
    "build_unavailable_path",
    "setup_logging",
]

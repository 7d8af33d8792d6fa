"""Tests for common utilities."""

import pytest
from tinylink.common.validators import is_valid_url, is_valid_short_code, is_absolute_url
from tinylink.common.headers import (
    extract_forwarded_headers,
    extract_identity,
    build_base_url,
    get_forwarded_path_prefix,
)
from tinylink.common.url_builder import build_short_url, build_unavailable_path


class TestValidators:
    """Test validation utilities."""

    def test_valid_urls(self):
        """Test valid URL validation."""
        valid, _ = is_valid_url("https://example.com")
        assert valid

        valid, _ = is_valid_url("http://example.com/path")
        assert valid

        valid, _ = is_valid_url("https://sub.example.com:8080/path?query=value")
        assert valid

    def test_invalid_urls(self):
        """Test invalid URL validation."""
        valid, error = is_valid_url("")
        assert not valid
        assert "required" in error.lower()

        valid, error = is_valid_url("not-a-url")
        assert not valid

        valid, error = is_valid_url("ftp://example.com")
        assert not valid
        assert "http" in error.lower()

        valid, error = is_valid_url("https://")
        assert not valid

        valid, error = is_valid_url("https://example.com:99999/")
        assert not valid

    def test_url_too_long(self):
        """URLs over 2048 characters are rejected."""
        valid, error = is_valid_url("https://example.com/" + "a" * 2048)
        assert not valid
        assert "too long" in error

    def test_absolute_url(self):
        """Test stored URL sanity check."""
        assert is_absolute_url("https://example.com/a")
        assert is_absolute_url("http://example.com:8080/a?b=1")
        assert not is_absolute_url("mailto://someone@example.com")
        assert not is_absolute_url("javascript://x")
        assert not is_absolute_url("file://host/etc/passwd")
        assert not is_absolute_url("/relative/path")
        assert not is_absolute_url("not a url")
        assert not is_absolute_url("")

    def test_valid_short_codes(self):
        """Test valid short code validation."""
        for code in ["abc123", "ABCDEF", "a1b2c3d4", "Test12"]:
            valid, _ = is_valid_short_code(code)
            assert valid, code

    @pytest.mark.parametrize("code", ["abc", "abcde", "abcdefghi", "abc-123", "abc_123", "abc 12", "abc12é", "abc123\n", "\nabc123"])
    def test_invalid_short_codes(self, code):
        """Test invalid short code validation."""
        valid, error = is_valid_short_code(code)
        assert not valid
        assert "6-8 alphanumeric" in error

    def test_reserved_short_codes(self):
        """Reserved words are rejected regardless of case."""
        valid, error = is_valid_short_code("Health")
        assert not valid
        assert "reserved" in error

        valid, error = is_valid_short_code("favicon")
        assert not valid


class TestHeaders:
    """Test header utilities."""

    def test_extract_forwarded_headers(self):
        """Test extracting forwarded headers."""
        headers = {
            "X-Forwarded-Proto": "https",
            "X-Forwarded-Host": "example.com",
            "X-Forwarded-For": "1.2.3.4",
        }

        forwarded = extract_forwarded_headers(headers)
        assert forwarded["forwarded_proto"] == "https"
        assert forwarded["forwarded_host"] == "example.com"
        assert forwarded["forwarded_for"] == "1.2.3.4"

    def test_extract_identity(self):
        """Identity header is matched case-insensitively and blank means anonymous."""
        assert extract_identity({"x-user-id": "U1"}, "X-User-Id") == "U1"
        assert extract_identity({"X-User-Id": "  U2 "}, "X-User-Id") == "U2"
        assert extract_identity({"X-User-Id": "   "}, "X-User-Id") is None
        assert extract_identity({}, "X-User-Id") is None

    def test_build_base_url_from_forwarded(self):
        """Test building base URL from forwarded headers."""
        headers = {
            "x-forwarded-proto": "https",
            "x-forwarded-host": "short.example.com",
        }

        base_url = build_base_url(headers, "http://localhost:9200", "http", "internal:9200")
        assert base_url == "https://short.example.com"

    def test_build_base_url_from_request(self):
        """Test building base URL from request scheme and host."""
        base_url = build_base_url({}, "http://localhost:9200", "http", "testserver")
        assert base_url == "http://testserver"

    def test_build_base_url_fallback(self):
        """Test fallback base URL."""
        base_url = build_base_url({}, "http://localhost:9200/")
        assert base_url == "http://localhost:9200"

    def test_forwarded_path_prefix(self):
        """Prefix is normalized to a single leading slash."""
        assert get_forwarded_path_prefix({"X-Forwarded-Prefix": "/s/"}) == "/s"
        assert get_forwarded_path_prefix({"x-forwarded-prefix": "links"}) == "/links"
        assert get_forwarded_path_prefix({"x-forwarded-prefix": "/"}) == ""
        assert get_forwarded_path_prefix({}) == ""


class TestURLBuilder:
    """Test URL building."""

    def test_build_short_url(self):
        """Test building short URL."""
        assert build_short_url("abc123", "https://example.com") == "https://example.com/abc123"

    def test_build_short_url_with_prefix(self):
        """Test building short URL with path prefix."""
        assert build_short_url("abc123", "https://example.com/", "/s/") == "https://example.com/s/abc123"

    def test_build_unavailable_path(self):
        """Test the friendly unavailable page location."""
        assert build_unavailable_path("abc123", "expired") == "/link-not-found?code=abc123&reason=expired"
        assert build_unavailable_path("abc123", "not_found", "/s") == "/s/link-not-found?code=abc123&reason=not_found"
        assert build_unavailable_path("", "not_found") == "/link-not-found?reason=not_found"

    def test_build_unavailable_path_escapes_code(self):
        """Arbitrary path segments are query-escaped."""
        assert build_unavailable_path("a b&c", "not_found") == "/link-not-found?code=a+b%26c&reason=not_found"

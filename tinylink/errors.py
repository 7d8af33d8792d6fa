"""Error types raised by the link service."""

from typing import Optional


class LinkError(Exception):
    """Base class for all link service errors.

    Attributes:
        kind: Stable machine-readable error identifier
        status_code: HTTP status the web layer maps this error to
    """

    kind = "link_error"
    status_code = 500

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


# Validation errors. These are detected before any store access.

class InvalidTargetUrl(LinkError, ValueError):
    kind = "invalid_target_url"
    status_code = 400


class InvalidCodeFormat(LinkError, ValueError):
    kind = "invalid_code_format"
    status_code = 400


class InvalidRequest(LinkError, ValueError):
    kind = "invalid_request"
    status_code = 400


# Allocation errors

class AllocationError(LinkError):
    kind = "allocation_error"
    status_code = 500


class CodeAlreadyExists(AllocationError):
    kind = "code_already_exists"
    status_code = 409


class AllocationExhausted(AllocationError):
    kind = "allocation_exhausted"
    status_code = 503


# Resolution errors

class NotFound(LinkError):
    kind = "not_found"
    status_code = 404


class Expired(LinkError):
    kind = "expired"
    status_code = 410


class InvalidStoredUrl(LinkError):
    """The stored target URL is malformed. Signals data corruption."""

    kind = "invalid_stored_url"
    status_code = 400


class NotLinkOwner(LinkError):
    kind = "not_link_owner"
    status_code = 403


class StoreUnavailable(LinkError):
    """Transient store failure (connection loss or timeout). Safe to retry."""

    kind = "store_unavailable"
    status_code = 503

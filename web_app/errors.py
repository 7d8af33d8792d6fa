"""Mapping from link service errors to HTTP errors."""

from fastapi import HTTPException

from tinylink.errors import LinkError, StoreUnavailable, InvalidStoredUrl


def to_http_exception(error: LinkError) -> HTTPException:
    """Translate a service error into an HTTPException.

    Server-side faults get a generic message; validation and conflict errors
    keep theirs so the caller can act on it.
    """
    if isinstance(error, StoreUnavailable):
        return HTTPException(
            status_code=error.status_code,
            detail="Service temporarily unavailable, please retry",
            headers={"Retry-After": "1"},
        )
    if isinstance(error, InvalidStoredUrl):
        return HTTPException(status_code=error.status_code, detail="Invalid target URL stored")
    return HTTPException(status_code=error.status_code, detail=error.message)

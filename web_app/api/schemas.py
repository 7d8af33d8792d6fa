"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from tinylink.models import Link


class CreateLinkRequest(BaseModel):
    """Request to create a short link."""

    target_url: str = Field(..., description="The destination URL (http or https)")
    code: Optional[str] = Field(None, description="Optional custom code, 6-8 alphanumeric characters")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "target_url": "https://example.com/very/long/path/to/resource",
                    "code": None
                },
                {
                    "target_url": "https://github.com/user/repo",
                    "code": "myrepo1"
                }
            ]
        }
    }


class LinkResponse(BaseModel):
    """A link record."""

    code: str
    target_url: str
    owner_id: Optional[str] = None
    is_anonymous: bool
    expires_at: Optional[datetime] = None
    total_clicks: int
    last_clicked_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_link(cls, link: Link, **extra) -> "LinkResponse":
        return cls(
            code=link.code,
            target_url=link.target_url,
            owner_id=link.owner_id,
            is_anonymous=link.is_anonymous,
            expires_at=link.expires_at,
            total_clicks=link.total_clicks,
            last_clicked_at=link.last_clicked_at,
            created_at=link.created_at,
            updated_at=link.updated_at,
            **extra,
        )


class CreateLinkResponse(LinkResponse):
    """Response after creating a link."""

    short_url: str = Field(..., description="The complete short URL")


class InspectLinkResponse(LinkResponse):
    """Diagnostic view of a link."""

    is_expired: bool = Field(..., description="Whether the link is past its expiry")


class ClaimLinksRequest(BaseModel):
    """Request to claim anonymous links."""

    codes: Optional[List[str]] = Field(None, description="Codes created while anonymous")


class ClaimLinksResponse(BaseModel):
    transferred_count: int


class DeleteLinkResponse(BaseModel):
    success: bool


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    store: str = Field(..., description="Link store status")
    cache: str = Field(..., description="Cache status")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Error response."""

    detail: str = Field(..., description="Error message")

"""Pydantic schemas for API requests and responses."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from shortener.common.validators import MAX_EXPIRY_HOURS, MAX_URL_LENGTH, is_valid_alias, is_valid_url


class ShortenRequest(BaseModel):
    """Request to shorten a URL."""

    url: str = Field(..., description="The URL to shorten", min_length=1, max_length=MAX_URL_LENGTH)
    custom_alias: Optional[str] = Field(None, description="Optional custom alias")
    expiry_hours: Optional[int] = Field(
        None, gt=0, le=MAX_EXPIRY_HOURS, description="Optional lifetime in hours"
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate URL format."""
        valid, error = is_valid_url(v)
        if not valid:
            raise ValueError(error)
        return v

    @field_validator("custom_alias")
    @classmethod
    def validate_alias(cls, v: Optional[str]) -> Optional[str]:
        """Validate alias format; blank means no alias."""
        if v is None or not v.strip():
            return None
        v = v.strip()
        valid, error = is_valid_alias(v)
        if not valid:
            raise ValueError(error)
        return v

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"url": "https://example.com/very/long/path/to/resource"},
                {"url": "https://github.com/user/repo", "custom_alias": "myrepo", "expiry_hours": 48},
            ]
        }
    }


class ShortenResponse(BaseModel):
    """Response after shortening a URL."""

    short_code: str = Field(..., description="The short code")
    short_url: str = Field(..., description="The complete short URL")
    original_url: str = Field(..., description="The original long URL")
    expires_at: Optional[datetime] = Field(None, description="Expiry timestamp, if any")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "short_code": "aZ3kP9q",
                    "short_url": "https://short.link/aZ3kP9q",
                    "original_url": "https://example.com/very/long/path",
                    "expires_at": None,
                }
            ]
        }
    }


class ClicksByDateResponse(BaseModel):
    date: str
    count: int


class ReferrerResponse(BaseModel):
    referer: str
    count: int


class DeviceStatsResponse(BaseModel):
    mobile: int = 0
    desktop: int = 0
    tablet: int = 0
    bot: int = 0
    unknown: int = 0


class AnalyticsResponse(BaseModel):
    """Aggregated click statistics."""

    short_code: str
    original_url: str
    total_clicks: int
    unique_ips: int
    created_at: Optional[datetime] = None
    last_clicked_at: Optional[datetime] = None
    clicks_by_date: List[ClicksByDateResponse]
    top_referrers: List[ReferrerResponse]
    device_stats: DeviceStatsResponse


class ClickResponse(BaseModel):
    id: Optional[int] = None
    url_id: int
    clicked_at: Optional[datetime] = None
    user_agent: str
    referer: str
    ip_address: str
    device_type: str


class ClickHistoryResponse(BaseModel):
    """One page of the click log."""

    clicks: List[ClickResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    database: str = Field(..., description="Database status")
    cache: str = Field(..., description="Cache status")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Error response."""

    detail: str = Field(..., description="Error message")

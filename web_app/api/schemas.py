"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime

from shortlink.database.models import Link


class ShortenRequest(BaseModel):
    """Request to shorten a URL."""

    long_url: str = Field(..., alias="longUrl", description="The URL to shorten")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {"longUrl": "https://example.com/very/long/path/to/resource"},
            ]
        },
    )


class ShortenResponse(BaseModel):
    """Response after shortening a URL."""

    short_url: str = Field(..., alias="shortUrl", description="The complete short URL")
    short_code: str = Field(..., alias="shortCode", description="The generated short code")
    long_url: str = Field(..., alias="longUrl", description="The original long URL")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "shortUrl": "http://10.0.0.5:8080/go/k3x9qa",
                    "shortCode": "k3x9qa",
                    "longUrl": "https://example.com/very/long/path",
                }
            ]
        },
    )

    @classmethod
    def from_link(cls, link: Link) -> "ShortenResponse":
        return cls(short_url=link.short_url, short_code=link.short_code, long_url=link.long_url)


class LinkResponse(BaseModel):
    """Stored link information."""

    id: int
    short_code: str = Field(..., alias="shortCode")
    short_url: str = Field(..., alias="shortUrl")
    long_url: str = Field(..., alias="longUrl")
    created_at: datetime = Field(..., alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_link(cls, link: Link) -> "LinkResponse":
        return cls(
            id=link.id,
            short_code=link.short_code,
            short_url=link.short_url,
            long_url=link.long_url,
            created_at=link.created_at,
        )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    database: str = Field(..., description="Database status")
    cache: str = Field(..., description="Cache status")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Structured error body."""

    error: str = Field(..., description="Machine-readable error kind")
    description: str = Field(..., description="Human-readable description")

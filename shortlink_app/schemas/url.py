from pydantic import BaseModel, HttpUrl, Field
from typing import Optional
from datetime import datetime


ALIAS_PATTERN = r"^[a-zA-Z0-9_-]+$"
ALIAS_MAX_LENGTH = 20


class URLCreate(BaseModel):
    original_url: HttpUrl = Field(..., description="The original URL to be shortened")
    alias: Optional[str] = Field(
        None,
        min_length=1,
        max_length=ALIAS_MAX_LENGTH,
        pattern=ALIAS_PATTERN,
        description="Custom alias used as the short code",
    )
    expires_at: Optional[datetime] = Field(None, description="When the short URL stops resolving")


class URLCreatedResponse(BaseModel):
    short_url: str


class URLInfo(BaseModel):
    """Read-only view of a Link"""
    id: int
    original_url: str
    short_code: str
    short_url: str
    alias: Optional[str] = None
    click_count: int
    created_at: datetime
    expires_at: Optional[datetime] = None

    @classmethod
    def from_link(cls, link, short_url: str) -> "URLInfo":
        """Build from a Link row; short_url comes from the service that owns base_url"""
        return cls(
            id=link.id,
            original_url=link.original_url,
            short_code=link.short_code,
            short_url=short_url,
            alias=link.alias,
            click_count=link.click_count,
            created_at=link.created_at,
            expires_at=link.expires_at,
        )

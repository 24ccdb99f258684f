"""
API Request and Response Schemas

This module defines all Pydantic models for API requests and responses.

The request model deliberately types ``url`` as a plain string: URL rules
are enforced by the allocator so that the API and programmatic callers
share one definition of a valid target.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from tinylink.core.setting import settings


class CreateLinkRequest(BaseModel):
    """Request model for link creation."""
    url: str = Field(..., description="Absolute http(s) URL to redirect to")
    code: Optional[str] = Field(
        default=None,
        description="Optional custom code matching [A-Za-z0-9]{6,8}"
    )


class LinkResponse(BaseModel):
    """A stored link with its usage counters."""
    model_config = ConfigDict(from_attributes=True)

    code: str
    url: str
    clicks: int
    last_clicked: Optional[datetime] = None
    created_at: datetime

    @field_validator("last_clicked", "created_at")
    @classmethod
    def assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # SQLite hands timestamps back without their offset
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @computed_field
    @property
    def short_url(self) -> str:
        return f"{settings.BASE_URL.rstrip('/')}/{self.code}"


class HealthResponse(BaseModel):
    """Response model for the health probe."""
    ok: bool
    version: str

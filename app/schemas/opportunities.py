"""Response schemas for the opportunity catalog and its artwork."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class OpportunitiesResponse(BaseModel):
    """Catalog entries; each is passed through exactly as stored in the static document."""

    opportunities: list[dict[str, Any]] = Field(default_factory=list)


class ArtworkItem(BaseModel):
    """Artwork row as returned to clients."""

    id: int
    type: str
    title: str
    visibility: str
    content_url: str | None = None
    content_text: str | None = None
    exhibited_by: str | None = None
    exhibit_status: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class ArtworkListResponse(BaseModel):
    """Response for GET /api/opportunities/{key}/artwork."""

    artworks: list[ArtworkItem]

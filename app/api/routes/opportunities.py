"""Opportunity catalog and per-opportunity artwork."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_viewer
from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.schemas.opportunities import ArtworkItem, ArtworkListResponse, OpportunitiesResponse
from app.schemas.session import Viewer
from app.services.artwork import list_artworks
from app.services.catalog import load_opportunities

router = APIRouter()


@router.get("", response_model=OpportunitiesResponse)
def get_opportunities(
    settings: Annotated[Settings, Depends(get_settings)],
    category: Annotated[str | None, Query()] = None,
) -> OpportunitiesResponse:
    """List catalog opportunities, optionally only those tagged with `category`."""
    return OpportunitiesResponse(
        opportunities=load_opportunities(settings.opportunities_file, category),
    )


@router.get("/{key}/artwork", response_model=ArtworkListResponse)
def get_opportunity_artwork(
    key: str,
    db: Annotated[Session, Depends(get_db)],
    viewer: Annotated[Viewer | None, Depends(get_viewer)],
) -> ArtworkListResponse:
    """
    Artwork for one opportunity, newest first (max 30).

    Anonymous callers see 'public' items; callers with a valid session also see 'league' items.
    """
    rows = list_artworks(db, key, viewer)
    return ArtworkListResponse(artworks=[ArtworkItem.model_validate(r) for r in rows])

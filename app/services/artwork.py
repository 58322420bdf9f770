"""Visibility-filtered artwork reads for an opportunity."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import ServiceError
from app.models import Artwork
from app.schemas.session import Viewer

logger = logging.getLogger(__name__)

ARTWORK_LIMIT = 30
EXHIBITOR_ROLE = "seller"
SHOWN_EXHIBIT_STATUSES = ("accepted", "acknowledged")


def visible_levels(viewer: Viewer | None) -> list[str]:
    """
    Visibility levels a viewer may read: 'public' for anyone, plus 'league' with a valid session.
    League membership is not checked; 'private' is never returned here.
    """
    return ["public", "league"] if viewer is not None else ["public"]


def list_artworks(db: Session, opportunity_key: str, viewer: Viewer | None) -> list[Artwork]:
    """Newest-first seller-exhibited, accepted/acknowledged artwork for one opportunity (max 30)."""
    stmt = (
        select(Artwork)
        .where(
            Artwork.opportunity_key == opportunity_key,
            Artwork.visibility.in_(visible_levels(viewer)),
            Artwork.exhibited_by == EXHIBITOR_ROLE,
            Artwork.exhibit_status.in_(SHOWN_EXHIBIT_STATUSES),
        )
        .order_by(Artwork.created_at.desc())
        .limit(ARTWORK_LIMIT)
    )
    try:
        return list(db.scalars(stmt).all())
    except SQLAlchemyError as e:
        logger.exception("Artwork query failed for opportunity_key=%s", opportunity_key)
        raise ServiceError("Failed to load artwork.") from e

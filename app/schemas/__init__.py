"""Pydantic request/response schemas."""

from app.schemas.health import HealthResponse
from app.schemas.opportunities import ArtworkItem, ArtworkListResponse, OpportunitiesResponse
from app.schemas.promises import PromiseCreatedResponse, PromiseCreateRequest, PromiseSummary
from app.schemas.session import MagicLinkClaims, Viewer

__all__ = [
    "ArtworkItem",
    "ArtworkListResponse",
    "HealthResponse",
    "MagicLinkClaims",
    "OpportunitiesResponse",
    "PromiseCreateRequest",
    "PromiseCreatedResponse",
    "PromiseSummary",
    "Viewer",
]

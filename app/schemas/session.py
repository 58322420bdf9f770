"""Schemas for token claims and the optional request viewer."""

from pydantic import BaseModel


class Viewer(BaseModel):
    """Caller identified by a valid session cookie."""

    user_id: int


class MagicLinkClaims(BaseModel):
    """Verified contents of a magic-link token."""

    user_id: int
    promise_id: int

"""Request/response schemas for promise submission."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class PromiseCreateRequest(BaseModel):
    """
    Body of POST /api/promises.

    Every field is optional at the schema level so that missing fields and
    unsafe emails are reported with the API's own messages. payload is opaque.
    """

    opportunity_key: str | None = None
    email: Any = None
    full_name: str | None = None
    payload: Any = None


class PromiseSummary(BaseModel):
    """Created promise as returned to the submitter."""

    id: int
    status: str
    opportunity_key: str
    created_at: datetime


class PromiseCreatedResponse(BaseModel):
    """Submission result plus whether an email actually went out."""

    promise: PromiseSummary
    message: str = Field(description="Human-readable delivery status of the magic link")

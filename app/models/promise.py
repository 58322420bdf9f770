"""ORM model for promises gated on email verification."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.dialects.postgresql import JSONB

from app.models.base import Base

PROMISE_STATUS_PENDING = "pending_email_verification"
PROMISE_STATUS_SUBMITTED = "submitted"


class Promise(Base):
    """
    A user's pledge for one opportunity.

    status moves once, from 'pending_email_verification' to 'submitted';
    payload is stored exactly as the client sent it.
    """

    __tablename__ = "promises"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    opportunity_key = Column(String(255), nullable=False, index=True)
    status = Column(String(32), nullable=False, default=PROMISE_STATUS_PENDING)
    payload = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

"""ORM model for artwork shown on opportunity pages."""

from sqlalchemy import Column, DateTime, Integer, String, Text, func

from app.models.base import Base


class Artwork(Base):
    """
    Display record tied to an opportunity key. Read-only for this service.

    visibility: 'public', 'league' or 'private'
    exhibit_status: e.g. 'pending', 'accepted', 'acknowledged', 'rejected'
    """

    __tablename__ = "artworks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    opportunity_key = Column(String(255), nullable=False, index=True)
    type = Column(String(32), nullable=False)
    title = Column(Text, nullable=False, default="")
    visibility = Column(String(16), nullable=False, default="public")
    content_url = Column(Text, nullable=True)
    content_text = Column(Text, nullable=True)
    exhibited_by = Column(String(32), nullable=True)
    exhibit_status = Column(String(32), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )

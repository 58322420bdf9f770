"""ORM model for users identified by email address."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, false, func

from app.models.base import Base


class User(Base):
    """
    Person who submitted at least one promise.

    email is stored lowercased and is unique; upserts rely on that constraint.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(254), nullable=False, unique=True, index=True)
    full_name = Column(Text, nullable=False)
    email_verified = Column(Boolean, nullable=False, default=False, server_default=false())
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

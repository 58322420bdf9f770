"""SQLAlchemy ORM models."""

from app.models.artwork import Artwork
from app.models.base import Base
from app.models.promise import Promise
from app.models.user import User

__all__ = ["Artwork", "Base", "Promise", "User"]

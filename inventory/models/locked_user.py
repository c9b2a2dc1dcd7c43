"""Locked user definitions."""

from sqlalchemy import Column, ForeignKey, Integer
from inventory.database import Base


class LockedUser(Base):
    """Marks a user as disabled: it cannot sign in nor count as an active administrator."""
    __tablename__ = "locked_user"

    user_id = Column(Integer, ForeignKey("user.id"), primary_key=True)

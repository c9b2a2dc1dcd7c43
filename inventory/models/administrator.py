"""Administrator role definitions."""

from sqlalchemy import Column, ForeignKey, Integer
from inventory.database import Base


class Administrator(Base):
    """Marks a user as holding the administrator role."""
    __tablename__ = "administrator"

    user_id = Column(Integer, ForeignKey("user.id"), primary_key=True)

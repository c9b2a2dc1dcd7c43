"""User model definitions."""

from sqlalchemy import Boolean, Column, Integer, String, UniqueConstraint
from inventory.database import Base


class User(Base):
    """Represents an application user. Users are locked, never deleted."""
    __tablename__ = "user"
    __table_args__ = (UniqueConstraint("email", name="uq_user_email"),)

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, index=True)
    password = Column(String, nullable=False)  # bcrypt hash string
    is_administrator = Column(Boolean, nullable=False, default=False)

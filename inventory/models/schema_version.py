"""Schema version record."""

from sqlalchemy import Column, Integer, String
from inventory.database import Base


class SchemaVersion(Base):
    """Singleton row holding the version of the deployed database schema."""
    __tablename__ = "schema_version"

    id = Column(Integer, primary_key=True)
    database_version = Column(String, nullable=False)

"""Key-value model definitions."""

from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text
from timesync.database import Base


class KeyValueEntry(Base):
    """Holds one serialized blob under a fixed key."""
    __tablename__ = "key_value_store"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

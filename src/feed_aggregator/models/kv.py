"""
Key-value entry model backing the SQL key-value store.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from feed_aggregator.models.base import Base


class KVEntryModel(Base):
    """SQLAlchemy ORM model for a stored key-value pair."""

    __tablename__ = "kv_entries"

    __table_args__ = (Index("ix_kv_entries_expires_at", "expires_at"),)

    key: Mapped[str] = mapped_column(String(512), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<KVEntryModel(key='{self.key}', expires_at={self.expires_at})>"

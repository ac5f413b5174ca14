"""Translation cache database model."""

import uuid
from datetime import datetime

from sqlalchemy import String, Text, DateTime, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column

from ketabyar.models.database.base import Base


class TranslationCacheEntry(Base):
    """Cached translation of a selected text span.

    Rows are looked up by exact ``(original_text, target_language)``.
    There is no uniqueness constraint, so concurrent writes of the same
    pair may leave duplicates; readers take the newest row.
    """

    __tablename__ = "translation_cache"
    __table_args__ = (
        Index("ix_translation_cache_lookup", "original_text", "target_language"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    original_text: Mapped[str] = mapped_column(Text, nullable=False)
    translated_text: Mapped[str] = mapped_column(Text, nullable=False)
    notes: Mapped[list] = mapped_column(JSON, default=list)
    source_language: Mapped[str] = mapped_column(String(10), default="en")
    target_language: Mapped[str] = mapped_column(String(10), nullable=False)
    provider: Mapped[str] = mapped_column(String(50), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )

"""Generative-language API key and upstream error log models."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, Boolean, DateTime, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ketabyar.models.database.base import Base


class GeminiApiKey(Base):
    """API key for the generative-language provider, managed by admins.

    The default active key is used for translation calls. When no key is
    stored, the ``GEMINI_API_KEY`` environment variable is used instead.
    """

    __tablename__ = "gemini_api_keys"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    key: Mapped[str] = mapped_column(Text, nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )
    last_used_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    error_logs: Mapped[list["ApiErrorLog"]] = relationship(
        "ApiErrorLog", back_populates="api_key", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<GeminiApiKey {self.name}>"

    def masked_key(self) -> str:
        """Return a masked version of the key for display."""
        if len(self.key) <= 12:
            return "••••••••"
        # Show first 4 and last 4 characters
        return f"{self.key[:4]}••••••••{self.key[-4:]}"


class ApiErrorLog(Base):
    """Failed upstream call recorded against the key that made it."""

    __tablename__ = "api_error_logs"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    api_key_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("gemini_api_keys.id", ondelete="CASCADE"), nullable=False
    )
    error: Mapped[str] = mapped_column(Text, nullable=False)
    status_code: Mapped[Optional[int]] = mapped_column(Integer)
    resolved: Mapped[bool] = mapped_column(Boolean, default=False)

    timestamp: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )

    api_key: Mapped["GeminiApiKey"] = relationship(
        "GeminiApiKey", back_populates="error_logs"
    )

"""Persisted translation cache.

Entries are matched exactly on ``(original_text, target_language)``;
there is no normalization and no expiry.
"""

import logging
from typing import Dict, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ketabyar.models.database.translation_cache import TranslationCacheEntry
from .models import ModelTranslation

logger = logging.getLogger(__name__)


class TranslationCache:
    """Lookup and insert of cached translations in the database."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def lookup(
        self, text: str, target_language: str
    ) -> Optional[ModelTranslation]:
        """Find the newest cached translation of ``text``.

        Args:
            text: Original selected text
            target_language: Target language code

        Returns:
            Cached ModelTranslation or None if not cached
        """
        result = await self.session.execute(
            select(TranslationCacheEntry)
            .where(
                TranslationCacheEntry.original_text == text,
                TranslationCacheEntry.target_language == target_language,
            )
            .order_by(TranslationCacheEntry.created_at.desc())
            .limit(1)
        )
        entry = result.scalars().first()
        if entry is None:
            return None

        return ModelTranslation(
            translated_text=entry.translated_text,
            notes=list(entry.notes or []),
        )

    async def store(
        self,
        original_text: str,
        translation: ModelTranslation,
        target_language: str,
        *,
        source_language: str = "en",
        provider: str = "gemini",
    ) -> TranslationCacheEntry:
        """Insert a translation into the cache."""
        entry = TranslationCacheEntry(
            original_text=original_text,
            translated_text=translation.translated_text,
            notes=list(translation.notes),
            source_language=source_language,
            target_language=target_language,
            provider=provider,
        )
        self.session.add(entry)
        await self.session.commit()
        return entry

    async def stats(self) -> Dict[str, object]:
        """Entry counts, total and per target language."""
        total = await self.session.scalar(
            select(func.count()).select_from(TranslationCacheEntry)
        )
        result = await self.session.execute(
            select(
                TranslationCacheEntry.target_language,
                func.count(TranslationCacheEntry.id),
            ).group_by(TranslationCacheEntry.target_language)
        )
        return {
            "total_entries": total or 0,
            "languages": {language: count for language, count in result.all()},
        }

    async def clear(self, target_language: Optional[str] = None) -> int:
        """Delete cached entries, optionally for one target language only.

        Returns:
            Number of entries deleted
        """
        statement = delete(TranslationCacheEntry)
        if target_language:
            statement = statement.where(
                TranslationCacheEntry.target_language == target_language
            )
        result = await self.session.execute(statement)
        await self.session.commit()

        logger.info(
            "Cleared %d translation cache entries (language=%s)",
            result.rowcount,
            target_language or "all",
        )
        return result.rowcount

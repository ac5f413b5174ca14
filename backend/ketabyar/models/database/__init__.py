"""Database models package."""

from ketabyar.models.database.base import Base, get_db
from ketabyar.models.database.book import Book
from ketabyar.models.database.translation_cache import TranslationCacheEntry
from ketabyar.models.database.api_key import GeminiApiKey, ApiErrorLog
from ketabyar.models.database.translation_prompt import TranslationPrompt

__all__ = [
    # Base
    "Base",
    "get_db",
    # Models
    "Book",
    "TranslationCacheEntry",
    "GeminiApiKey",
    "ApiErrorLog",
    "TranslationPrompt",
]

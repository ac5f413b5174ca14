"""API key resolution and upstream error recording.

Resolution priority (highest to lowest):
1. Stored key marked default and active
2. Any other active stored key, most recently created first
3. GEMINI_API_KEY environment variable
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ketabyar.config import Settings
from ketabyar.models.database.api_key import ApiErrorLog, GeminiApiKey
from .errors import MissingApiKeyError

logger = logging.getLogger(__name__)


@dataclass
class ResolvedApiKey:
    """Key to use for one call, with the stored row id when it has one."""

    key: str
    key_id: Optional[str] = None

    @property
    def source(self) -> str:
        return "database" if self.key_id else "environment"


class ApiKeyService:
    """Stored API key operations shared by the translate and admin routes."""

    @staticmethod
    async def resolve(session: AsyncSession, settings: Settings) -> ResolvedApiKey:
        """Pick the API key for a translation call.

        Raises:
            MissingApiKeyError: If no stored or configured key exists
        """
        result = await session.execute(
            select(GeminiApiKey)
            .where(GeminiApiKey.is_active.is_(True))
            .order_by(GeminiApiKey.is_default.desc(), GeminiApiKey.created_at.desc())
            .limit(1)
        )
        stored = result.scalars().first()
        if stored is not None:
            return ResolvedApiKey(key=stored.key, key_id=stored.id)

        if settings.gemini_api_key:
            return ResolvedApiKey(key=settings.gemini_api_key)

        raise MissingApiKeyError(
            "No API key available. Add one in the admin console or set GEMINI_API_KEY."
        )

    @staticmethod
    async def mark_used(session: AsyncSession, key_id: str) -> None:
        """Update the last-used timestamp of a stored key."""
        await session.execute(
            update(GeminiApiKey)
            .where(GeminiApiKey.id == key_id)
            .values(last_used_at=datetime.utcnow())
        )
        await session.commit()

    @staticmethod
    async def record_error(
        session: AsyncSession,
        key_id: str,
        error: str,
        status_code: Optional[int] = None,
    ) -> ApiErrorLog:
        """Log a failed upstream call against the key that made it."""
        log = ApiErrorLog(api_key_id=key_id, error=error, status_code=status_code)
        session.add(log)
        await session.commit()
        logger.info("Recorded upstream error for key %s (status=%s)", key_id, status_code)
        return log

    @staticmethod
    async def create(
        session: AsyncSession,
        name: str,
        key: str,
        is_default: bool = False,
    ) -> GeminiApiKey:
        """Store a new key. A new default key replaces the previous default."""
        if is_default:
            await session.execute(
                update(GeminiApiKey)
                .where(GeminiApiKey.is_default.is_(True))
                .values(is_default=False)
            )

        api_key = GeminiApiKey(name=name, key=key, is_default=is_default)
        session.add(api_key)
        await session.commit()
        await session.refresh(api_key)
        return api_key

"""Translation prompt template storage.

Templates are managed from the admin console. Only the default template
takes part in translation; a new default replaces the previous one.
"""

import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ketabyar.models.database.translation_prompt import TranslationPrompt

logger = logging.getLogger(__name__)


class PromptTemplateService:
    """Stored translation prompt operations."""

    @staticmethod
    async def default_instructions(session: AsyncSession) -> Optional[str]:
        """Text of the default template, or None to use the built-in prompt."""
        result = await session.execute(
            select(TranslationPrompt.prompt)
            .where(TranslationPrompt.is_default.is_(True))
            .order_by(TranslationPrompt.updated_at.desc())
            .limit(1)
        )
        return result.scalars().first()

    @staticmethod
    async def _clear_default(session: AsyncSession, keep_id: Optional[str] = None) -> None:
        stmt = update(TranslationPrompt).where(TranslationPrompt.is_default.is_(True))
        if keep_id is not None:
            stmt = stmt.where(TranslationPrompt.id != keep_id)
        await session.execute(stmt.values(is_default=False))

    @classmethod
    async def create(
        cls,
        session: AsyncSession,
        name: str,
        prompt: str,
        is_default: bool = False,
    ) -> TranslationPrompt:
        """Store a new template."""
        if is_default:
            await cls._clear_default(session)

        template = TranslationPrompt(name=name, prompt=prompt, is_default=is_default)
        session.add(template)
        await session.commit()
        await session.refresh(template)
        logger.info("Stored translation prompt '%s' (default=%s)", name, is_default)
        return template

    @classmethod
    async def update(
        cls,
        session: AsyncSession,
        template: TranslationPrompt,
        name: Optional[str] = None,
        prompt: Optional[str] = None,
        is_default: Optional[bool] = None,
    ) -> TranslationPrompt:
        """Apply the given changes to a template. None leaves a field as is."""
        if is_default:
            await cls._clear_default(session, keep_id=template.id)

        if name is not None:
            template.name = name
        if prompt is not None:
            template.prompt = prompt
        if is_default is not None:
            template.is_default = is_default

        await session.commit()
        await session.refresh(template)
        return template

"""Translation prompt template routes for the admin console."""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ketabyar.api.dependencies import verify_api_token
from ketabyar.core.translation.prompts import PromptTemplateService
from ketabyar.models.database import get_db, TranslationPrompt

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(verify_api_token)])


# ============================================================================
# Pydantic Models
# ============================================================================

class TranslationPromptCreateRequest(BaseModel):
    """Create a new translation prompt template."""
    name: Optional[str] = None
    prompt: Optional[str] = None
    is_default: bool = False


class TranslationPromptUpdateRequest(BaseModel):
    """Update an existing template. Omitted fields are left unchanged."""
    name: Optional[str] = None
    prompt: Optional[str] = None
    is_default: Optional[bool] = None


class TranslationPromptResponse(BaseModel):
    """Stored translation prompt template."""
    id: str
    name: str
    prompt: str
    is_default: bool
    created_at: datetime
    updated_at: datetime


def _prompt_response(template: TranslationPrompt) -> TranslationPromptResponse:
    return TranslationPromptResponse(
        id=template.id,
        name=template.name,
        prompt=template.prompt,
        is_default=template.is_default,
        created_at=template.created_at,
        updated_at=template.updated_at,
    )


async def _get_prompt_or_404(prompt_id: str, db: AsyncSession) -> TranslationPrompt:
    template = await db.get(TranslationPrompt, prompt_id)
    if not template:
        raise HTTPException(status_code=404, detail="Translation prompt not found")
    return template


# ============================================================================
# Routes
# ============================================================================

@router.get("/translation-prompts")
async def list_translation_prompts(
    db: AsyncSession = Depends(get_db),
) -> list[TranslationPromptResponse]:
    """List translation prompt templates, the default first."""
    result = await db.execute(
        select(TranslationPrompt).order_by(
            TranslationPrompt.is_default.desc(), TranslationPrompt.created_at.desc()
        )
    )
    return [_prompt_response(template) for template in result.scalars().all()]


@router.post("/translation-prompts")
async def create_translation_prompt(
    request: TranslationPromptCreateRequest,
    db: AsyncSession = Depends(get_db),
) -> TranslationPromptResponse:
    """Store a new template.

    Marking the template as default clears the default flag on all others.
    """
    if not request.name or not request.prompt:
        raise HTTPException(status_code=400, detail="Missing required fields")

    template = await PromptTemplateService.create(
        db, name=request.name, prompt=request.prompt, is_default=request.is_default
    )
    return _prompt_response(template)


@router.patch("/translation-prompts/{prompt_id}")
async def update_translation_prompt(
    prompt_id: str,
    request: TranslationPromptUpdateRequest,
    db: AsyncSession = Depends(get_db),
) -> TranslationPromptResponse:
    """Update a template's name, text or default flag."""
    template = await _get_prompt_or_404(prompt_id, db)

    if request.name == "" or request.prompt == "":
        raise HTTPException(status_code=400, detail="Name and prompt cannot be empty")

    template = await PromptTemplateService.update(
        db,
        template,
        name=request.name,
        prompt=request.prompt,
        is_default=request.is_default,
    )
    logger.info("Updated translation prompt %s", prompt_id)
    return _prompt_response(template)


@router.delete("/translation-prompts/{prompt_id}", status_code=204)
async def delete_translation_prompt(
    prompt_id: str,
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Delete a template. Deleting the default restores the built-in prompt."""
    template = await _get_prompt_or_404(prompt_id, db)

    await db.delete(template)
    await db.commit()
    logger.info("Deleted translation prompt %s", prompt_id)

    return Response(status_code=204)

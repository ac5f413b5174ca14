"""Selection translation API routes."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from ketabyar.api.dependencies import AppSettings, get_book_or_404, verify_api_token
from ketabyar.core.translation import (
    MissingApiKeyError,
    TranslationCache,
    TranslationClient,
    TranslationConfig,
    TranslationError,
    TranslationRequest,
    TranslationResult,
    TranslationService,
    UpstreamError,
)
from ketabyar.core.translation.api_keys import ApiKeyService, ResolvedApiKey
from ketabyar.core.translation.prompts import PromptTemplateService
from ketabyar.models.database import get_db
from ketabyar.utils.text import safe_truncate

logger = logging.getLogger(__name__)

router = APIRouter()

GENERIC_FAILURE = "Failed to translate text"


class TranslateRequest(BaseModel):
    """Request to translate a selection from a book."""

    model_config = ConfigDict(populate_by_name=True)

    # Optional here so a missing field is reported as 400, not 422
    book_id: Optional[str] = Field(default=None, alias="bookId")
    selected_text: Optional[str] = Field(default=None, alias="selectedText")
    target_language: Optional[str] = Field(default=None, alias="targetLanguage")


class CacheStatsResponse(BaseModel):
    """Translation cache statistics response."""
    total_entries: int
    languages: dict[str, int]


class CacheClearResponse(BaseModel):
    """Translation cache clear response."""
    entries_deleted: int
    target_language: Optional[str] = None


@router.post("/translate", response_model=TranslationResult)
async def translate_selection(
    request: TranslateRequest,
    app_settings: AppSettings,
    db: AsyncSession = Depends(get_db),
) -> TranslationResult:
    """Translate text selected in a book, using the text around it.

    Returns the translation, advisory notes, a timestamp and the
    surrounding context that was sent to the model.
    """
    if not request.book_id or not request.selected_text:
        raise HTTPException(status_code=400, detail="Missing required fields")

    book = await get_book_or_404(request.book_id, db)

    # Set only when the cache misses and the model has to be called
    api_key: Optional[ResolvedApiKey] = None

    async def make_client() -> TranslationClient:
        nonlocal api_key
        api_key = await ApiKeyService.resolve(db, app_settings)
        logger.info("[Translate API] calling model, key_source=%s", api_key.source)
        config = TranslationConfig.from_settings(app_settings, api_key.key, api_key.key_id)
        return TranslationClient(config)

    cache = TranslationCache(db) if app_settings.translation_cache_enabled else None
    service = TranslationService(
        make_client,
        cache=cache,
        context_window=app_settings.context_window_chars,
        instructions=await PromptTemplateService.default_instructions(db),
    )

    pipeline_request = TranslationRequest(
        selected_text=request.selected_text,
        full_context=book.content or "",
        book_title=book.title,
        author_name=book.author,
        target_language=request.target_language or app_settings.default_target_language,
    )

    logger.info(
        "[Translate API] book_id=%s, text='%s', target=%s",
        book.id,
        safe_truncate(request.selected_text, 50),
        pipeline_request.target_language,
    )

    try:
        result = await service.translate(pipeline_request)
    except MissingApiKeyError as e:
        logger.error("Translation unavailable: %s", e)
        raise HTTPException(status_code=500, detail=GENERIC_FAILURE)
    except UpstreamError as e:
        logger.error(
            "Translation upstream failure: book_id=%s, status=%s, error=%s",
            book.id,
            e.status_code,
            e,
        )
        if api_key is not None and api_key.key_id:
            await ApiKeyService.record_error(db, api_key.key_id, str(e), e.status_code)
        raise HTTPException(status_code=500, detail=GENERIC_FAILURE)
    except TranslationError as e:
        logger.error("Translation failed: book_id=%s, error=%s", book.id, e)
        raise HTTPException(status_code=500, detail=GENERIC_FAILURE)

    if api_key is not None and api_key.key_id:
        await ApiKeyService.mark_used(db, api_key.key_id)

    return result


@router.get("/translate/cache/stats", dependencies=[Depends(verify_api_token)])
async def get_cache_stats(
    db: AsyncSession = Depends(get_db),
) -> CacheStatsResponse:
    """Get translation cache statistics, total and per target language."""
    stats = await TranslationCache(db).stats()
    return CacheStatsResponse(**stats)


@router.post("/translate/cache/clear", dependencies=[Depends(verify_api_token)])
async def clear_cache(
    target_language: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
) -> CacheClearResponse:
    """Clear cached translations.

    Subsequent translations make fresh model calls until the cache is
    rebuilt. Pass ``target_language`` to clear only one language.
    """
    count = await TranslationCache(db).clear(target_language)
    return CacheClearResponse(entries_deleted=count, target_language=target_language)

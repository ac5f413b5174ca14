"""API key management routes for the admin console."""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ketabyar.api.dependencies import verify_api_token
from ketabyar.core.translation.api_keys import ApiKeyService
from ketabyar.models.database import get_db, GeminiApiKey, ApiErrorLog

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(verify_api_token)])

# Unresolved errors shown with each key in the listing
RECENT_ERRORS_PER_KEY = 5


class CreateApiKeyRequest(BaseModel):
    """Request to store a new API key."""
    name: Optional[str] = None
    key: Optional[str] = None
    is_default: bool = False


class ApiErrorLogResponse(BaseModel):
    """Upstream error log entry."""
    id: str
    api_key_id: str
    error: str
    status_code: Optional[int] = None
    resolved: bool
    timestamp: datetime


class ApiKeyResponse(BaseModel):
    """Stored API key, with the key itself masked."""
    id: str
    name: str
    masked_key: str
    is_default: bool
    is_active: bool
    created_at: datetime
    last_used_at: Optional[datetime] = None
    recent_errors: list[ApiErrorLogResponse] = []


def _error_response(log: ApiErrorLog) -> ApiErrorLogResponse:
    return ApiErrorLogResponse(
        id=log.id,
        api_key_id=log.api_key_id,
        error=log.error,
        status_code=log.status_code,
        resolved=log.resolved,
        timestamp=log.timestamp,
    )


def _key_response(api_key: GeminiApiKey) -> ApiKeyResponse:
    unresolved = sorted(
        (log for log in api_key.error_logs if not log.resolved),
        key=lambda log: log.timestamp,
        reverse=True,
    )
    return ApiKeyResponse(
        id=api_key.id,
        name=api_key.name,
        masked_key=api_key.masked_key(),
        is_default=api_key.is_default,
        is_active=api_key.is_active,
        created_at=api_key.created_at,
        last_used_at=api_key.last_used_at,
        recent_errors=[_error_response(log) for log in unresolved[:RECENT_ERRORS_PER_KEY]],
    )


@router.get("/api-keys")
async def list_api_keys(
    db: AsyncSession = Depends(get_db),
) -> list[ApiKeyResponse]:
    """List stored API keys with their most recent unresolved errors."""
    result = await db.execute(
        select(GeminiApiKey)
        .options(selectinload(GeminiApiKey.error_logs))
        .order_by(GeminiApiKey.is_default.desc(), GeminiApiKey.created_at.desc())
    )
    return [_key_response(api_key) for api_key in result.scalars().all()]


@router.post("/api-keys")
async def create_api_key(
    request: CreateApiKeyRequest,
    db: AsyncSession = Depends(get_db),
) -> ApiKeyResponse:
    """Store a new API key.

    Marking the key as default clears the default flag on all others.
    """
    if not request.name or not request.key:
        raise HTTPException(status_code=400, detail="Missing required fields")

    api_key = await ApiKeyService.create(
        db, name=request.name, key=request.key, is_default=request.is_default
    )
    logger.info("Stored API key '%s' (default=%s)", api_key.name, api_key.is_default)

    return ApiKeyResponse(
        id=api_key.id,
        name=api_key.name,
        masked_key=api_key.masked_key(),
        is_default=api_key.is_default,
        is_active=api_key.is_active,
        created_at=api_key.created_at,
        last_used_at=api_key.last_used_at,
    )


@router.delete("/api-keys/{key_id}", status_code=204)
async def delete_api_key(
    key_id: str,
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Delete a stored API key and its error logs."""
    api_key = await db.get(GeminiApiKey, key_id)
    if not api_key:
        raise HTTPException(status_code=404, detail="API key not found")

    await db.delete(api_key)
    await db.commit()
    logger.info("Deleted API key %s", key_id)

    return Response(status_code=204)


@router.get("/api-keys/errors")
async def list_api_errors(
    db: AsyncSession = Depends(get_db),
) -> list[ApiErrorLogResponse]:
    """List upstream errors, unresolved first, newest first."""
    result = await db.execute(
        select(ApiErrorLog).order_by(
            ApiErrorLog.resolved.asc(), ApiErrorLog.timestamp.desc()
        )
    )
    return [_error_response(log) for log in result.scalars().all()]


@router.patch("/api-keys/errors/{error_id}/resolve")
async def resolve_api_error(
    error_id: str,
    db: AsyncSession = Depends(get_db),
) -> ApiErrorLogResponse:
    """Mark an upstream error as resolved."""
    log = await db.get(ApiErrorLog, error_id)
    if not log:
        raise HTTPException(status_code=404, detail="Error log not found")

    log.resolved = True
    await db.commit()
    await db.refresh(log)

    return _error_response(log)

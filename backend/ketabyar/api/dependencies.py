"""API dependencies for settings, authentication and book lookup.

This module provides:
- Request-scoped access to application settings
- Optional API token authentication for admin endpoints
- Book lookup with 404 handling
"""

import logging
import secrets
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Header
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ketabyar.config import Settings, settings
from ketabyar.models.database.book import Book

logger = logging.getLogger(__name__)


def get_settings() -> Settings:
    """Settings for the current request.

    Handlers receive settings through this dependency so tests can
    override them per app instance.
    """
    return settings


AppSettings = Annotated[Settings, Depends(get_settings)]


# =============================================================================
# Authentication Dependencies
# =============================================================================


async def verify_api_token(
    app_settings: AppSettings,
    authorization: Annotated[Optional[str], Header()] = None,
    x_api_key: Annotated[Optional[str], Header(alias="X-API-Key")] = None,
) -> bool:
    """Verify API token for admin endpoints.

    Supports two authentication methods:
    1. Authorization: Bearer <token>
    2. X-API-Key: <token>

    If API_AUTH_TOKEN is not set in environment, authentication is disabled
    (for local development).

    Raises:
        HTTPException: 401 if auth is required but token is invalid/missing
    """
    if not app_settings.api_auth_token:
        return True

    token = None
    if authorization and authorization.startswith("Bearer "):
        token = authorization[7:]
    elif x_api_key:
        token = x_api_key

    if not token:
        raise HTTPException(
            status_code=401,
            detail="Authentication required. Provide Authorization: Bearer <token> or X-API-Key header.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # Constant-time comparison
    if not secrets.compare_digest(token, app_settings.api_auth_token):
        raise HTTPException(
            status_code=401,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return True


async def get_book_or_404(book_id: str, db: AsyncSession) -> Book:
    """Fetch a book by id.

    Raises:
        HTTPException: 404 if the book does not exist
    """
    result = await db.execute(select(Book).where(Book.id == book_id))
    book = result.scalar_one_or_none()

    if not book:
        raise HTTPException(status_code=404, detail="Book not found")

    return book

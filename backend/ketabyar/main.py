"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ketabyar import __version__
from ketabyar.config import settings
from ketabyar.models.database.base import init_db
from ketabyar.api.v1.routes import translate, api_keys, prompts

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup: Initialize database
    await init_db()
    logger.info("Database initialized: %s", settings.database_url)

    if not settings.gemini_api_key:
        logger.warning(
            "GEMINI_API_KEY is not set; translation requires a stored API key"
        )

    yield


app = FastAPI(
    title=settings.app_name,
    description="Book reader backend with context-aware Persian translation",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(translate.router, prefix="/api/v1", tags=["translation"])
app.include_router(api_keys.router, prefix="/api/v1", tags=["api-keys"])
app.include_router(prompts.router, prefix="/api/v1", tags=["translation-prompts"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "Ketabyar API", "version": __version__}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}

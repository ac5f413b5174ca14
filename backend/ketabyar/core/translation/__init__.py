"""Selection translation pipeline.

This package provides the components behind the reader's translate
feature:
- extract_context: Slices the text around a selection
- build_prompt: Builds the JSON-requesting prompt
- TranslationClient: Calls the model and parses its answer
- TranslationCache: Persisted cache of earlier translations
- TranslationService: Orchestrates the complete flow
"""

from .cache import TranslationCache
from .client import TranslationClient, TranslationConfig
from .context_extractor import extract_context
from .errors import MissingApiKeyError, TranslationError, UpstreamError
from .models import (
    ExtractedContext,
    ModelTranslation,
    OriginalContext,
    TranslationRequest,
    TranslationResult,
)
from .output_processor import OutputProcessor, parse_model_output
from .prompt_builder import build_prompt
from .service import TranslationService

__all__ = [
    "TranslationCache",
    "TranslationClient",
    "TranslationConfig",
    "extract_context",
    "MissingApiKeyError",
    "TranslationError",
    "UpstreamError",
    "ExtractedContext",
    "ModelTranslation",
    "OriginalContext",
    "TranslationRequest",
    "TranslationResult",
    "OutputProcessor",
    "parse_model_output",
    "build_prompt",
    "TranslationService",
]

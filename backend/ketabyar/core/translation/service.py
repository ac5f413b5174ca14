"""Selection translation service.

Coordinates the flow:
Cache -> ContextExtractor -> PromptBuilder -> TranslationClient -> Result

The chain is all-or-nothing: there are no retries, no partial results
and no timeout beyond what the outbound transport applies. The client
may be handed over as an async factory, in which case it is only built
(and its API key only resolved) when the cache misses.
"""

import logging
from typing import Awaitable, Callable, Optional, Union

from ketabyar.utils.text import safe_truncate
from .cache import TranslationCache
from .client import TranslationClient
from .context_extractor import DEFAULT_CONTEXT_WINDOW, extract_context
from .errors import TranslationError
from .models import (
    ModelTranslation,
    OriginalContext,
    TranslationRequest,
    TranslationResult,
    utc_timestamp,
)
from .prompt_builder import build_prompt

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], Awaitable[TranslationClient]]


class TranslationService:
    """Translates a reader's selection using its surrounding context."""

    def __init__(
        self,
        client: Union[TranslationClient, ClientFactory],
        *,
        cache: Optional[TranslationCache] = None,
        context_window: int = DEFAULT_CONTEXT_WINDOW,
        instructions: Optional[str] = None,
    ):
        """Initialize the service.

        Args:
            client: Client for the generative-language provider, or an
                async factory that builds one on first use
            cache: Optional translation cache; None disables caching
            context_window: Characters of context on each side of the selection
            instructions: Optional instruction template replacing the built-in one
        """
        self._client = client
        self.cache = cache
        self.context_window = context_window
        self.instructions = instructions

    async def get_client(self) -> TranslationClient:
        """Return the client, building it from the factory if needed."""
        if not isinstance(self._client, TranslationClient):
            self._client = await self._client()
        return self._client

    async def translate(self, request: TranslationRequest) -> TranslationResult:
        """Translate the selected text of a request.

        Args:
            request: Selection, its full context and book metadata

        Returns:
            TranslationResult including the original context

        Raises:
            UpstreamError: If the provider call fails
            MissingApiKeyError: If the client factory finds no API key
            TranslationError: For any other failure in the pipeline
        """
        try:
            return await self._translate(request)
        except TranslationError:
            raise
        except Exception as e:
            logger.exception(
                "Translation failed for '%s'",
                safe_truncate(request.selected_text, 50),
            )
            raise TranslationError("Failed to translate text") from e

    async def _translate(self, request: TranslationRequest) -> TranslationResult:
        context = extract_context(
            request.full_context, request.selected_text, self.context_window
        )

        translation = await self._cached(request)
        if translation is None:
            prompt = build_prompt(
                request.selected_text,
                context.before,
                context.after,
                book_title=request.book_title,
                author_name=request.author_name,
                target_language=request.target_language,
                instructions=self.instructions,
            )
            client = await self.get_client()
            translation = await client.call_model(prompt)
            await self._store(request, translation, client.config.provider)

        return TranslationResult(
            translated_text=translation.translated_text,
            notes=translation.notes,
            timestamp=utc_timestamp(),
            original_context=OriginalContext(
                before=context.before,
                selected=request.selected_text,
                after=context.after,
            ),
        )

    async def _cached(self, request: TranslationRequest) -> Optional[ModelTranslation]:
        if self.cache is None:
            return None

        cached = await self.cache.lookup(request.selected_text, request.target_language)
        if cached is not None:
            logger.info(
                "Translation cache hit for '%s' (%s)",
                safe_truncate(request.selected_text, 50),
                request.target_language,
            )
        return cached

    async def _store(
        self,
        request: TranslationRequest,
        translation: ModelTranslation,
        provider: str,
    ) -> None:
        if self.cache is None:
            return

        # Fallback parses are returned but never pinned in the cache
        if not translation.cacheable:
            logger.warning(
                "Not caching unstructured model answer for '%s'",
                safe_truncate(request.selected_text, 50),
            )
            return

        await self.cache.store(
            request.selected_text,
            translation,
            request.target_language,
            provider=provider,
        )

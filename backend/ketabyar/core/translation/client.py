"""Translation client for the generative-language provider.

Sends a built prompt through LiteLLM and hands the text content to the
OutputProcessor. One outbound call per request; failures are raised as
UpstreamError and never retried here.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from litellm import acompletion

from ketabyar.config import Settings
from .errors import UpstreamError
from .models import ModelTranslation
from .output_processor import OutputProcessor

logger = logging.getLogger(__name__)


@dataclass
class TranslationConfig:
    """LLM configuration resolved for a single translation request."""

    # Connection parameters
    api_key: str
    model: str = "gemini-2.0-flash"
    provider: str = "gemini"

    # Generation parameters (low randomness, short output)
    temperature: float = 0.1
    top_p: float = 0.5
    max_tokens: int = 500

    # Metadata (for logging/error tracking)
    api_key_id: Optional[str] = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        api_key: str,
        api_key_id: Optional[str] = None,
    ) -> "TranslationConfig":
        """Build a config from application settings and a resolved key."""
        return cls(
            api_key=api_key,
            model=settings.gemini_model,
            temperature=settings.translation_temperature,
            top_p=settings.translation_top_p,
            max_tokens=settings.translation_max_tokens,
            api_key_id=api_key_id,
        )

    def get_litellm_model(self) -> str:
        """Get model string in LiteLLM format (provider/model)."""
        if self.model.startswith(f"{self.provider}/"):
            return self.model
        return f"{self.provider}/{self.model}"

    def to_litellm_kwargs(self) -> Dict[str, Any]:
        """Convert to kwargs for litellm.acompletion()."""
        return {
            "model": self.get_litellm_model(),
            "api_key": self.api_key,
            "temperature": self.temperature,
            "top_p": self.top_p,
            "max_tokens": self.max_tokens,
        }


class TranslationClient:
    """Calls the model with a prompt and parses its answer."""

    def __init__(self, config: TranslationConfig):
        self.config = config

    async def call_model(self, prompt: str) -> ModelTranslation:
        """Send a prompt to the model and parse the response.

        Args:
            prompt: Prompt built by build_prompt()

        Returns:
            ModelTranslation with translation and notes

        Raises:
            UpstreamError: If the provider call fails
        """
        start_time = time.time()

        kwargs = self.config.to_litellm_kwargs()
        kwargs["messages"] = [{"role": "user", "content": prompt}]

        logger.info(
            "LLM call: model=%s, temperature=%s, max_tokens=%s",
            self.config.get_litellm_model(),
            self.config.temperature,
            self.config.max_tokens,
        )

        try:
            response = await acompletion(**kwargs)
        except Exception as e:
            status_code = _status_code_of(e)
            logger.error(
                "LLM call failed: model=%s, status=%s, error=%s",
                self.config.model,
                status_code,
                e,
            )
            raise UpstreamError(
                f"Generative-language request failed: {e}",
                status_code=status_code,
            ) from e

        latency_ms = int((time.time() - start_time) * 1000)
        content = _content_of(response)
        logger.info("LLM response: latency=%dms, chars=%d", latency_ms, len(content))

        return OutputProcessor.parse(content)


def _status_code_of(error: Exception) -> Optional[int]:
    """HTTP status carried by a provider exception, if any."""
    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int):
        return status_code
    return None


def _content_of(response: Any) -> str:
    """Text content of the first choice of a completion response."""
    if not response.choices:
        return ""
    return response.choices[0].message.content or ""

"""Output processor for model responses.

Models are asked for a bare JSON object but often wrap it in prose or
return something else entirely. Parsing is two-tier: a structured parse
from the first ``{`` onward, then a pattern scan for the
``translatedText`` field, then the raw text itself. Parsing never raises.
"""

import json
import logging
import re
from typing import Any, List

from .models import ModelTranslation

logger = logging.getLogger(__name__)


class OutputProcessor:
    """Turns raw model text into a ModelTranslation."""

    # "translatedText": "..." with either quote style
    TRANSLATED_TEXT_PATTERN = re.compile(
        r"""["']translatedText["']\s*:\s*["']([^"']+)["']"""
    )

    _decoder = json.JSONDecoder()

    @classmethod
    def parse(cls, raw: str) -> ModelTranslation:
        """Parse a raw model response.

        Args:
            raw: Text content returned by the model

        Returns:
            ModelTranslation, possibly holding the raw text as translation
        """
        raw = raw or ""

        start = raw.find("{")
        candidate = raw[start:] if start != -1 else raw.strip()

        try:
            # Trailing prose after the object is ignored
            payload, _ = cls._decoder.raw_decode(candidate)
        except ValueError:
            payload = None

        if isinstance(payload, dict):
            return ModelTranslation(
                translated_text=cls._as_text(payload.get("translatedText")),
                notes=cls._clean_notes(payload.get("notes")),
            )

        logger.debug("Model output is not a JSON object, falling back to pattern scan")

        match = cls.TRANSLATED_TEXT_PATTERN.search(raw)
        if match:
            return ModelTranslation(
                translated_text=match.group(1), notes=[], structured=False
            )

        # The whole response, untouched
        return ModelTranslation(translated_text=raw, notes=[], structured=False)

    @staticmethod
    def _as_text(value: Any) -> str:
        if isinstance(value, str):
            return value
        return ""

    @staticmethod
    def _clean_notes(value: Any) -> List[str]:
        """Keep only non-empty string notes, trimmed."""
        if not isinstance(value, list):
            return []
        return [
            note.strip()
            for note in value
            if isinstance(note, str) and note.strip()
        ]


def parse_model_output(raw: str) -> ModelTranslation:
    """Convenience wrapper around OutputProcessor.parse."""
    return OutputProcessor.parse(raw)

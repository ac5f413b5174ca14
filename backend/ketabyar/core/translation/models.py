"""Translation pipeline models.

This module defines the input and output data structures of the
selection translation pipeline. Output models serialize with camelCase
field names, which is what the reader frontend consumes.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TranslationRequest(BaseModel):
    """A single request to translate a selected span of a book."""

    selected_text: str = Field(..., min_length=1, description="Text selected by the reader")
    full_context: str = Field(default="", description="Full text the selection was made in")
    book_title: Optional[str] = Field(default=None, description="Title of the book")
    author_name: Optional[str] = Field(default=None, description="Author of the book")
    target_language: str = Field(default="fa", description="Target language code")


class ExtractedContext(BaseModel):
    """Window of text around a selection."""

    before: str = ""
    after: str = ""


class ModelTranslation(BaseModel):
    """Translation and notes parsed from a model response.

    ``structured`` is False when the response was not a JSON object and
    the text came from a fallback. It is never serialized.
    """

    translated_text: str = ""
    notes: List[str] = Field(default_factory=list)
    structured: bool = Field(default=True, exclude=True)

    @property
    def cacheable(self) -> bool:
        return self.structured and bool(self.translated_text)


class OriginalContext(BaseModel):
    """Selection together with the text surrounding it."""

    before: str
    selected: str
    after: str


class TranslationResult(BaseModel):
    """Final output of the translation pipeline."""

    model_config = ConfigDict(populate_by_name=True)

    translated_text: str = Field(..., alias="translatedText")
    notes: List[str] = Field(default_factory=list)
    timestamp: str = Field(..., description="ISO-8601 time the result was produced")
    original_context: Optional[OriginalContext] = Field(
        default=None, alias="originalContext"
    )


def utc_timestamp() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()

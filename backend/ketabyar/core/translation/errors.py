"""Exceptions raised by the translation pipeline.

Routes map these to HTTP 5xx responses. Parse problems in model output
are not represented here: the output parser always degrades to a
usable string instead of raising.
"""

from typing import Optional


class TranslationError(RuntimeError):
    """Base exception for translation pipeline failures."""


class UpstreamError(TranslationError):
    """The generative-language provider call did not succeed.

    Args:
        message: Human-readable description for logs.
        status_code: HTTP status reported by the provider, when known.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MissingApiKeyError(TranslationError):
    """No API key is stored or configured for the provider."""

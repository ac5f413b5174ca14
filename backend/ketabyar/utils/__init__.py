"""Utility modules for the Ketabyar backend."""

from .text import safe_truncate

__all__ = ["safe_truncate"]

"""Utility functions for text handling."""

from knowledge_recall.utils.text import normalize_text, tokenize

__all__ = [
    "normalize_text",
    "tokenize",
]

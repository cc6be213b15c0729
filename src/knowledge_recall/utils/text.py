"""
Text normalization and tokenization shared by query and candidate scoring.

Both sides of a comparison must go through the same functions so that
exact-match and keyword checks are symmetric.
"""

import re
from typing import Iterable, Set

_WHITESPACE_RE = re.compile(r"\s+")
_TOKEN_SPLIT_RE = re.compile(r"[\s,;.!?()\[\]{}\"']+")


def normalize_text(text: str) -> str:
    """
    Lowercase, trim and collapse internal whitespace runs to single spaces.

    Args:
        text: Raw text

    Returns:
        Normalized text

    Example:
        >>> normalize_text("  I live   in\\tLondon ")
        'i live in london'
    """
    return _WHITESPACE_RE.sub(" ", text.lower().strip())


def tokenize(text: str, min_length: int = 2, stop_words: Iterable[str] = ()) -> Set[str]:
    """
    Split normalized text into a set of keyword tokens.

    Splits on whitespace and the punctuation ``, ; . ! ? ( ) [ ] { } " '``,
    drops tokens shorter than ``min_length`` and any token in ``stop_words``.

    Args:
        text: Text already passed through normalize_text()
        min_length: Minimum token length to keep
        stop_words: Tokens to ignore

    Returns:
        Deduplicated token set
    """
    excluded = set(stop_words)
    return {
        token
        for token in _TOKEN_SPLIT_RE.split(text)
        if len(token) >= min_length and token not in excluded
    }

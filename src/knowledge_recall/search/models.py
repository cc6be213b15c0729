"""
Models for hybrid search results.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ScoreResult(Generic[T]):
    """
    A scored retrieval candidate.

    Produced fresh for every query and never persisted. The composite
    ``score`` is always ``min(1.0, embedding_similarity + keyword_boost +
    exact_match_boost)``.

    Attributes:
        item: The candidate (a Chunk, a MemoryEntry, or any caller type)
        score: Composite score in [0, 1]
        embedding_similarity: Cosine similarity remapped to [0, 1]
        keyword_boost: Boost from shared keyword tokens
        exact_match_boost: Boost from exact text or full token coverage
    """

    item: T
    score: float
    embedding_similarity: float
    keyword_boost: float
    exact_match_boost: float

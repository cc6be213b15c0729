"""
Hybrid search: embedding similarity combined with lexical boosts.
"""

from knowledge_recall.search.models import ScoreResult
from knowledge_recall.search.ranking import find_similar
from knowledge_recall.search.scoring import cosine_similarity, score

__all__ = [
    "ScoreResult",
    "cosine_similarity",
    "find_similar",
    "score",
]

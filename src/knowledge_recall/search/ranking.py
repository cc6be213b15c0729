"""
Top-K ranking over a candidate set with hybrid scoring.
"""

import logging
from typing import Callable, Iterable, List, Optional, Sequence, TypeVar

from knowledge_recall.config import ScoringWeights
from knowledge_recall.search.models import ScoreResult
from knowledge_recall.search.scoring import DEFAULT_WEIGHTS, prepare_text, score_prepared

logger = logging.getLogger(__name__)

T = TypeVar("T")


def find_similar(
    query: str,
    query_embedding: Sequence[float],
    candidates: Iterable[T],
    k: int,
    get_text: Callable[[T], str],
    get_embedding: Callable[[T], Optional[Sequence[float]]],
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> List[ScoreResult[T]]:
    """
    Rank candidates against a query and return the best ``k``.

    Candidates whose embedding is missing, empty, or of a different length
    than the query embedding are dropped before scoring. Vectors of a
    different length come from another embedding model and cannot be
    compared.

    Results are sorted by descending composite score. The sort is stable, so
    ties keep the original candidate order.

    Args:
        query: Query text
        query_embedding: Embedding of the query
        candidates: Items to rank
        k: Maximum number of results (must be positive)
        get_text: Extracts the searchable text of an item
        get_embedding: Extracts the stored embedding of an item
        weights: Lexical boost configuration

    Returns:
        Up to ``k`` ScoreResult objects, best first

    Raises:
        ValueError: If k is not positive
    """
    if k < 1:
        raise ValueError(f"k must be positive, got {k}")

    if not query_embedding:
        return []

    dimension = len(query_embedding)
    prepared_query = prepare_text(query, weights)

    results: List[ScoreResult[T]] = []
    skipped = 0

    for candidate in candidates:
        embedding = get_embedding(candidate)
        if not embedding or len(embedding) != dimension:
            skipped += 1
            continue

        results.append(
            score_prepared(
                prepared_query,
                query_embedding,
                prepare_text(get_text(candidate), weights),
                embedding,
                weights,
                candidate,
            )
        )

    results.sort(key=lambda result: result.score, reverse=True)
    top_results = results[:k]

    if top_results:
        average = sum(result.score for result in top_results) / len(top_results)
        logger.debug(
            f"Ranked {len(results)} candidates ({skipped} without usable embedding), "
            f"returning {len(top_results)} (avg score: {average:.3f})"
        )
    else:
        logger.debug(f"No scorable candidates ({skipped} without usable embedding)")

    return top_results

"""
Hybrid relevance scoring.

Combines embedding cosine similarity with two lexical heuristics:

- keyword boost: a fixed increment per shared token, capped
- exact-match boost: identical normalized text, and/or full coverage of
  the query tokens by the candidate

The same function scores RAG chunks and memory facts. It is pure and
performs no I/O.
"""

import math
from typing import AbstractSet, FrozenSet, NamedTuple, Optional, Sequence, TypeVar

from knowledge_recall.config import ScoringWeights
from knowledge_recall.search.models import ScoreResult
from knowledge_recall.utils.text import normalize_text, tokenize

T = TypeVar("T")

DEFAULT_WEIGHTS = ScoringWeights()


def cosine_similarity(vec1: Sequence[float], vec2: Sequence[float]) -> float:
    """
    Cosine similarity remapped from [-1, 1] to [0, 1].

    Args:
        vec1: First vector
        vec2: Second vector

    Returns:
        ``(cos + 1) / 2``, or 0.0 when the lengths differ or either vector
        has zero magnitude
    """
    if len(vec1) != len(vec2) or not vec1:
        return 0.0

    dot_product = sum(a * b for a, b in zip(vec1, vec2))
    magnitude1 = math.sqrt(sum(a * a for a in vec1))
    magnitude2 = math.sqrt(sum(b * b for b in vec2))

    if magnitude1 == 0 or magnitude2 == 0:
        return 0.0

    # Rounding can push |cos| slightly past 1
    cos = max(-1.0, min(1.0, dot_product / (magnitude1 * magnitude2)))
    return (cos + 1.0) / 2.0


def keyword_boost(
    query_tokens: AbstractSet[str],
    candidate_tokens: AbstractSet[str],
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> float:
    """Boost per shared token, capped at ``weights.keyword_boost_cap``."""
    matches = len(query_tokens & candidate_tokens)
    return min(weights.keyword_boost_cap, matches * weights.keyword_boost_per_match)


def exact_match_boost(
    normalized_query: str,
    normalized_candidate: str,
    query_tokens: AbstractSet[str],
    candidate_tokens: AbstractSet[str],
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> float:
    """
    Boost for exact matches.

    Both terms may apply: identical normalized strings add
    ``exact_match_boost`` and a candidate containing every query token adds
    ``token_superset_boost``.
    """
    boost = 0.0

    if normalized_query == normalized_candidate:
        boost += weights.exact_match_boost

    if query_tokens and query_tokens <= candidate_tokens:
        boost += weights.token_superset_boost

    return boost


class PreparedText(NamedTuple):
    """Normalized text with its keyword tokens."""

    normalized: str
    tokens: FrozenSet[str]


def prepare_text(text: str, weights: ScoringWeights = DEFAULT_WEIGHTS) -> PreparedText:
    """Normalize and tokenize text once so it can be scored many times."""
    normalized = normalize_text(text)
    tokens = tokenize(normalized, weights.min_token_length, weights.stop_words)
    return PreparedText(normalized, frozenset(tokens))


def score(
    query_text: str,
    query_embedding: Sequence[float],
    candidate_text: str,
    candidate_embedding: Sequence[float],
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    item: Optional[T] = None,
) -> ScoreResult[T]:
    """
    Score one candidate against a query.

    Candidates without an embedding must be filtered out before calling
    this function; a missing vector is not scored at all.

    Args:
        query_text: Raw query text
        query_embedding: Embedding of the query
        candidate_text: Raw candidate text
        candidate_embedding: Embedding of the candidate
        weights: Lexical boost configuration
        item: Object to attach to the result (defaults to candidate_text)

    Returns:
        ScoreResult with the composite score clamped to [0, 1]
    """
    return score_prepared(
        prepare_text(query_text, weights),
        query_embedding,
        prepare_text(candidate_text, weights),
        candidate_embedding,
        weights,
        candidate_text if item is None else item,
    )


def score_prepared(
    query: PreparedText,
    query_embedding: Sequence[float],
    candidate: PreparedText,
    candidate_embedding: Sequence[float],
    weights: ScoringWeights,
    item: T,
) -> ScoreResult[T]:
    """Score with query and candidate text already prepared by prepare_text()."""
    similarity = cosine_similarity(query_embedding, candidate_embedding)
    keywords = keyword_boost(query.tokens, candidate.tokens, weights)
    exact = exact_match_boost(
        query.normalized, candidate.normalized, query.tokens, candidate.tokens, weights
    )

    return ScoreResult(
        item=item,
        score=min(1.0, similarity + keywords + exact),
        embedding_similarity=similarity,
        keyword_boost=keywords,
        exact_match_boost=exact,
    )

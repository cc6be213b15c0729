"""
Configuration for retrieval and ingestion.

Settings are read from the environment with the ``KNOWLEDGE_RECALL_`` prefix,
e.g. ``KNOWLEDGE_RECALL_CHUNK_SIZE=1024`` or
``KNOWLEDGE_RECALL_SCORING__EXACT_MATCH_BOOST=0.2``.
"""

from typing import FrozenSet

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Accepted ranges for the ingestion and retrieval entry points
MIN_CHUNK_SIZE = 128
MAX_CHUNK_SIZE = 2048
MIN_CHUNK_OVERLAP = 0
MAX_CHUNK_OVERLAP = 256
MIN_RESULT_LIMIT = 1
MAX_RESULT_LIMIT = 10
MIN_MEMORY_AGE_DAYS = 0
MAX_MEMORY_AGE_DAYS = 30

# Hybrid scoring constants
KEYWORD_BOOST_PER_MATCH = 0.10
KEYWORD_BOOST_CAP = 0.25
EXACT_MATCH_BOOST = 0.15
TOKEN_SUPERSET_BOOST = 0.10
MIN_TOKEN_LENGTH = 2


def clamp(value: int, lower: int, upper: int) -> int:
    """Clamp an integer setting into the inclusive range [lower, upper]."""
    return max(lower, min(upper, value))


class ScoringWeights(BaseModel):
    """Lexical boosts added on top of embedding similarity."""

    keyword_boost_per_match: float = Field(default=KEYWORD_BOOST_PER_MATCH, ge=0.0)
    keyword_boost_cap: float = Field(default=KEYWORD_BOOST_CAP, ge=0.0)
    exact_match_boost: float = Field(
        default=EXACT_MATCH_BOOST, ge=0.0, description="Added when normalized texts are equal"
    )
    token_superset_boost: float = Field(
        default=TOKEN_SUPERSET_BOOST,
        ge=0.0,
        description="Added when the candidate contains every query token",
    )
    min_token_length: int = Field(default=MIN_TOKEN_LENGTH, ge=1)
    stop_words: FrozenSet[str] = Field(
        default_factory=frozenset, description="Lowercase tokens ignored by keyword matching"
    )


class RecallSettings(BaseSettings):
    """Runtime settings for RAG ingestion and memory/RAG retrieval."""

    model_config = SettingsConfigDict(env_prefix="KNOWLEDGE_RECALL_", env_nested_delimiter="__")

    rag_enabled: bool = True
    chunk_size: int = Field(default=512, ge=MIN_CHUNK_SIZE, le=MAX_CHUNK_SIZE)
    chunk_overlap: int = Field(default=64, ge=MIN_CHUNK_OVERLAP, le=MAX_CHUNK_OVERLAP)
    rag_chunk_limit: int = Field(default=5, ge=MIN_RESULT_LIMIT, le=MAX_RESULT_LIMIT)

    memory_enabled: bool = True
    memory_limit: int = Field(default=5, ge=MIN_RESULT_LIMIT, le=MAX_RESULT_LIMIT)
    memory_min_age_days: int = Field(default=2, ge=MIN_MEMORY_AGE_DAYS, le=MAX_MEMORY_AGE_DAYS)

    ingestion_batch_size: int = Field(default=5, ge=1)
    scoring: ScoringWeights = Field(default_factory=ScoringWeights)

    @model_validator(mode="after")
    def _check_overlap(self) -> "RecallSettings":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be smaller than "
                f"chunk_size ({self.chunk_size})"
            )
        return self

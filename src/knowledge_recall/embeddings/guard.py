"""
Single-writer access to an embedding provider.

Local model runtimes are usually not reentrant. SerializedEmbeddingProvider
holds an asyncio.Lock around every provider call, so ingestion, bulk
re-embedding and query-time embedding never overlap as long as they share
one instance.
"""

import asyncio
import logging
from typing import List

from knowledge_recall.embeddings.protocol import EmbeddingProvider
from knowledge_recall.errors import EmbeddingError

logger = logging.getLogger(__name__)


class SerializedEmbeddingProvider:
    """
    Wraps an EmbeddingProvider so at most one call is in flight.

    Also normalizes the failure contract: any provider exception is raised
    as EmbeddingError, and blank text short-circuits to a zero vector of the
    provider's dimension without touching the model.

    Example:
        >>> embedding = SerializedEmbeddingProvider(SentenceTransformerEmbedding())
        >>> memory_service = MemoryService(memory_store, embedding)
        >>> knowledge = KnowledgeBaseService(document_store, embedding)
    """

    def __init__(self, provider: EmbeddingProvider):
        """
        Args:
            provider: The embedding provider to serialize
        """
        if isinstance(provider, SerializedEmbeddingProvider):
            provider = provider.provider

        self.provider = provider
        self._lock = asyncio.Lock()

        logger.info(
            f"SerializedEmbeddingProvider initialized "
            f"(model={provider.model_name}, dimension={provider.dimension})"
        )

    @classmethod
    def wrap(cls, provider: EmbeddingProvider) -> "SerializedEmbeddingProvider":
        """Return provider unchanged if it is already serialized, else wrap it."""
        if isinstance(provider, cls):
            return provider
        return cls(provider)

    @property
    def dimension(self) -> int:
        return self.provider.dimension

    @property
    def model_name(self) -> str:
        return self.provider.model_name

    @property
    def busy(self) -> bool:
        """Whether a provider call is currently in flight."""
        return self._lock.locked()

    def _zero_vector(self) -> List[float]:
        return [0.0] * self.dimension

    async def generate_embedding(self, text: str) -> List[float]:
        """
        Embed one text.

        Raises:
            EmbeddingError: If the provider fails or returns a vector of the
                wrong dimension
        """
        if not text or not text.strip():
            return self._zero_vector()

        async with self._lock:
            try:
                vector = await self.provider.generate_embedding(text)
            except Exception as e:
                raise EmbeddingError(f"Embedding failed ({self.model_name}): {e}") from e

        vector = list(vector)
        if len(vector) != self.dimension:
            raise EmbeddingError(
                f"Provider returned {len(vector)} dimensions, expected {self.dimension}"
            )

        logger.debug(f"Generated embedding for text ({len(text)} chars)")
        return vector

    async def generate_embeddings(self, texts: List[str]) -> List[List[float]]:
        """
        Embed several texts in one provider call.

        Blank entries map to zero vectors and are not sent to the provider.

        Raises:
            EmbeddingError: If the provider fails or returns the wrong shape
        """
        if not texts:
            return []

        indexed = [(i, text) for i, text in enumerate(texts) if text and text.strip()]
        results: List[List[float]] = [self._zero_vector() for _ in texts]

        if not indexed:
            return results

        async with self._lock:
            try:
                vectors = await self.provider.generate_embeddings([text for _, text in indexed])
            except Exception as e:
                raise EmbeddingError(f"Batch embedding failed ({self.model_name}): {e}") from e

        if len(vectors) != len(indexed):
            raise EmbeddingError(
                f"Provider returned {len(vectors)} vectors for {len(indexed)} texts"
            )

        for (i, _), vector in zip(indexed, vectors):
            vector = list(vector)
            if len(vector) != self.dimension:
                raise EmbeddingError(
                    f"Provider returned {len(vector)} dimensions, expected {self.dimension}"
                )
            results[i] = vector

        logger.debug(f"Generated embeddings for {len(indexed)} texts")
        return results

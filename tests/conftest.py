"""Shared fixtures: a deterministic embedding provider and in-memory stores."""

import asyncio
from typing import Dict, Iterable, List, Optional

import pytest

from knowledge_recall.ingestion import ProcessingStatusTracker
from knowledge_recall.storage import InMemoryDocumentStore, InMemoryMemoryStore


class FakeEmbeddingProvider:
    """
    Embedding provider returning fixed vectors.

    Texts found in ``vectors`` get their mapped vector, every other text gets
    ``default_vector``. Any text containing one of the ``fail_on`` markers
    raises. Tracks how many calls overlap so tests can check serialization.
    """

    def __init__(
        self,
        dimension: int = 3,
        vectors: Optional[Dict[str, List[float]]] = None,
        fail_on: Iterable[str] = (),
        delay: float = 0.0,
        model_name: str = "fake-embedding",
    ):
        self._dimension = dimension
        self._model_name = model_name
        self.vectors = dict(vectors or {})
        self.fail_on = tuple(fail_on)
        self.delay = delay
        self.default_vector = [1.0] * dimension

        self.calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_name(self) -> str:
        return self._model_name

    async def generate_embedding(self, text: str) -> List[float]:
        self.calls.append(text)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if any(marker in text for marker in self.fail_on):
                raise RuntimeError(f"model failure on {text[:20]!r}")
            return list(self.vectors.get(text, self.default_vector))
        finally:
            self.in_flight -= 1

    async def generate_embeddings(self, texts: List[str]) -> List[List[float]]:
        return [await self.generate_embedding(text) for text in texts]


@pytest.fixture
def fake_embedding():
    """Deterministic 3-dimensional embedding provider."""
    return FakeEmbeddingProvider()


@pytest.fixture
def document_store():
    """Fresh in-memory document store."""
    return InMemoryDocumentStore()


@pytest.fixture
def memory_store():
    """Fresh in-memory memory store."""
    return InMemoryMemoryStore()


@pytest.fixture
def status_tracker():
    """Status tracker with short terminal delays."""
    return ProcessingStatusTracker(completed_delay=0.01, failed_delay=0.01, deleted_delay=0.01)


@pytest.fixture
def make_embedding():
    """Factory for providers with custom vectors, failures or delays."""
    return FakeEmbeddingProvider

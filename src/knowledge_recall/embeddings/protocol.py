"""
Structural type shared by every embedding backend.

Services accept anything with this shape, so tests can pass a fake.
"""

from typing import List, Protocol

from typing_extensions import runtime_checkable


@runtime_checkable
class EmbeddingProvider(Protocol):
    """
    Anything that turns text into fixed-length float vectors.

    Embeddings convert strings into dense vector representations, enabling
    semantic similarity search over document chunks and memory facts. All
    implementations must:

    1. Return vectors of a fixed dimension for the loaded model
    2. Expose that dimension so stored vectors from another model can be detected
    3. Raise an exception when a vector cannot be produced
    4. Be awaitable, even when the work itself is synchronous

    Implementations do not need to be reentrant: wrap them in
    SerializedEmbeddingProvider, which allows one call in flight at a time.

    Example:
        >>> embedder = SentenceTransformerEmbedding()
        >>> vector = await embedder.generate_embedding("Hello world")
        >>> len(vector) == embedder.dimension
        True
    """

    @property
    def dimension(self) -> int:
        """
        Length of every vector this backend returns.

        Vectors stored under one model cannot be compared with vectors from a
        model of another dimension.

        Returns:
            Vector length
        """
        ...

    @property
    def model_name(self) -> str:
        """
        Name of the model behind the vectors, recorded for re-embedding.

        Returns:
            Model name or identifier (e.g., "sentence-transformers/all-MiniLM-L6-v2")
        """
        ...

    async def generate_embedding(self, text: str) -> List[float]:
        """
        Generate the embedding for a single text.

        Args:
            text: Text to embed

        Returns:
            Embedding vector of length ``dimension``

        Raises:
            Exception: Any provider-specific failure
        """
        ...

    async def generate_embeddings(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for multiple texts.

        Semantically equivalent to calling generate_embedding() for each text.

        Args:
            texts: Texts to embed

        Returns:
            One vector per input text, in input order
        """
        ...

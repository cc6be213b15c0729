"""
Text embedding abstractions for knowledge-recall.

Provides a protocol-based embedding interface, a single-writer wrapper, and
model-specific adapters:
- SentenceTransformerEmbedding: on-device sentence-transformers models
- OpenAIEmbedding: OpenAI API embeddings
"""

from knowledge_recall.embeddings.guard import SerializedEmbeddingProvider
from knowledge_recall.embeddings.protocol import EmbeddingProvider

__all__ = [
    "EmbeddingProvider",
    "SerializedEmbeddingProvider",
]

# Optional adapters (import only if dependencies available)
try:
    from knowledge_recall.embeddings.sentence_transformer import (  # noqa: F401
        SentenceTransformerEmbedding,
    )

    __all__.append("SentenceTransformerEmbedding")
except ImportError:
    pass

try:
    from knowledge_recall.embeddings.openai_embedding import OpenAIEmbedding  # noqa: F401

    __all__.append("OpenAIEmbedding")
except ImportError:
    pass

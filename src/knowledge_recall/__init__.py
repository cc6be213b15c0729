"""
knowledge-recall: Local retrieval of long-term memories and document context for AI chat.

Core components:
- ingestion: Document chunking, embedding and persistence with progress status
- search: Hybrid scoring (embedding similarity + keyword and exact-match boosts) and top-K ranking
- embeddings: Embedding provider protocol, single-writer wrapper and adapters
- storage: Protocol abstractions and implementations for document and memory stores
- models: Core data models (Document, Chunk, MemoryEntry)
"""

__version__ = "0.1.0"

from knowledge_recall.config import RecallSettings, ScoringWeights
from knowledge_recall.errors import (
    ConfigurationError,
    DocumentNotFoundError,
    EmbeddingError,
    IngestionError,
    KnowledgeRecallError,
)
from knowledge_recall.knowledge_service import KnowledgeBaseService
from knowledge_recall.memory_service import MemoryService
from knowledge_recall.models import Chunk, Document, MemoryEntry

__all__ = [
    "__version__",
    # Models
    "Chunk",
    "Document",
    "MemoryEntry",
    # Configuration
    "RecallSettings",
    "ScoringWeights",
    # Errors
    "ConfigurationError",
    "DocumentNotFoundError",
    "EmbeddingError",
    "IngestionError",
    "KnowledgeRecallError",
    # Services
    "KnowledgeBaseService",
    "MemoryService",
]

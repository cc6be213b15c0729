"""
Storage protocols for documents, chunks and memories.

Provides protocol definitions for storage backends. Implementations can use
various databases (SQLite, PostgreSQL, in-memory, etc.) as long as they
satisfy the protocol interface.
"""

from knowledge_recall.storage.documents.memory import InMemoryDocumentStore
from knowledge_recall.storage.documents.sqlalchemy import SQLAlchemyDocumentStore
from knowledge_recall.storage.memories.memory import InMemoryMemoryStore
from knowledge_recall.storage.memories.sqlalchemy import SQLAlchemyMemoryStore
from knowledge_recall.storage.protocols import DocumentStore, MemoryStore

__all__ = [
    "DocumentStore",
    "MemoryStore",
    "InMemoryDocumentStore",
    "InMemoryMemoryStore",
    "SQLAlchemyDocumentStore",
    "SQLAlchemyMemoryStore",
]

"""
In-memory document and chunk storage implementation.

Provides a simple in-memory store suitable for testing and development.
For persistence, use the SQLAlchemy implementation.
"""

import logging
from typing import Dict, List, Optional

from knowledge_recall.models import Chunk, Document

logger = logging.getLogger(__name__)


class InMemoryDocumentStore:
    """
    In-memory implementation of the DocumentStore protocol.

    Documents are kept by ID and chunks by document ID in insertion order.
    Records are copied on the way in and out so callers cannot mutate
    stored state. Data is lost on restart.
    """

    def __init__(self):
        self._documents: Dict[str, Document] = {}
        self._chunks: Dict[str, List[Chunk]] = {}  # document_id -> chunks

        logger.info("InMemoryDocumentStore initialized")

    def add_document(self, document: Document) -> str:
        """Add a document to the store."""
        self._documents[document.id] = document.model_copy(deep=True)
        logger.debug(f"Inserted document {document.id}: '{document.name}'")
        return document.id

    def get_document(self, document_id: str) -> Optional[Document]:
        """Retrieve a document by ID."""
        document = self._documents.get(document_id)
        return document.model_copy(deep=True) if document else None

    def list_documents(self) -> List[Document]:
        """List all documents, most recently created first."""
        documents = sorted(self._documents.values(), key=lambda d: d.created_at, reverse=True)
        return [document.model_copy(deep=True) for document in documents]

    def update_document(self, document: Document) -> bool:
        """Replace a stored document."""
        if document.id not in self._documents:
            logger.error(f"Document {document.id} not found")
            return False

        self._documents[document.id] = document.model_copy(deep=True)
        logger.debug(f"Updated document {document.id}")
        return True

    def delete_document(self, document_id: str) -> bool:
        """Delete a document and all of its chunks."""
        if document_id not in self._documents:
            return False

        del self._documents[document_id]
        chunk_count = len(self._chunks.pop(document_id, []))

        logger.info(f"Deleted document {document_id} ({chunk_count} chunks)")
        return True

    def mark_document_processed(self, document_id: str, chunk_count: int) -> bool:
        """Flag a document as processed with its final chunk count."""
        document = self._documents.get(document_id)
        if document is None:
            logger.warning(f"Cannot mark document {document_id} processed: not found")
            return False

        self._documents[document_id] = document.model_copy(
            update={"is_processed": True, "chunk_count": chunk_count}
        )
        return True

    def insert_chunks(self, chunks: List[Chunk]) -> int:
        """Append a batch of chunks."""
        for chunk in chunks:
            self._chunks.setdefault(chunk.document_id, []).append(chunk.model_copy(deep=True))

        logger.debug(f"Inserted {len(chunks)} chunks")
        return len(chunks)

    def get_chunks(self, document_id: str) -> List[Chunk]:
        """Get all chunks of a document ordered by chunk_index."""
        chunks = sorted(self._chunks.get(document_id, []), key=lambda c: c.chunk_index)
        return [chunk.model_copy(deep=True) for chunk in chunks]

    def get_chunks_with_embeddings(self) -> List[Chunk]:
        """Get every chunk carrying an embedding, across all documents."""
        return [
            chunk.model_copy(deep=True)
            for chunks in self._chunks.values()
            for chunk in chunks
            if chunk.embedding is not None
        ]

    def update_chunk(self, chunk: Chunk) -> bool:
        """Replace a stored chunk."""
        chunks = self._chunks.get(chunk.document_id, [])
        for i, existing in enumerate(chunks):
            if existing.id == chunk.id:
                chunks[i] = chunk.model_copy(deep=True)
                return True

        logger.error(f"Chunk {chunk.id} not found")
        return False

    def delete_chunks(self, document_id: str) -> int:
        """Delete all chunks of a document."""
        count = len(self._chunks.pop(document_id, []))
        logger.info(f"Deleted {count} chunks for document {document_id}")
        return count

    def clear(self):
        """Clear ALL documents and chunks from the store."""
        count = len(self._documents)
        self._documents.clear()
        self._chunks.clear()
        logger.info(f"Cleared all documents ({count} total)")
